from apdoom.messages import MessageBuffer, format_message, plain_text
from apdoom.transport import ChatMessage, HintMessage, ItemRecvMessage, ItemSendMessage


def test_item_send_and_receive_formats():
    assert format_message(ItemSendMessage("Shotgun", "Bob")) == "~9Shotgun~2 was sent to ~4Bob"
    assert format_message(ItemRecvMessage("Backpack", "Alice")) == "~2Received ~9Backpack~2 from ~4Alice"


def test_hint_format():
    hint = HintMessage("Blue keycard", "Alice", "Bob", "Hangar - Red armor", checked=False)
    assert format_message(hint) == (
        "~9Blue keycard~2 from ~4Alice~2 to ~4Bob~2 at ~3Hangar - Red armor (Unchecked)"
    )
    checked = HintMessage("Map", "Alice", "Bob", "Hangar", checked=True)
    assert format_message(checked).endswith("~3Hangar (Checked)")


def test_chat_and_plain_text():
    assert format_message(ChatMessage("hello")) == "~2hello"
    assert plain_text(ChatMessage("hello")) == "hello"
    assert plain_text(ItemSendMessage("Shotgun", "Bob")) == "Shotgun was sent to Bob"
    assert plain_text(ItemSendMessage("Shotgun", "Bob", text="Alice sent Shotgun to Bob")) == "Alice sent Shotgun to Bob"


def test_buffer_holds_messages_until_ready():
    shown = []
    buffer = MessageBuffer(shown.append)
    buffer.post("one")
    buffer.post("two")
    assert shown == []
    assert buffer.flush() == 0
    assert buffer.has_pending

    buffer.ready = True
    assert buffer.flush() == 2
    assert shown == ["one", "two"]
    assert not buffer.has_pending

    buffer.post("three")
    assert shown == ["one", "two", "three"]
