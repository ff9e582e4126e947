from gptkit.chat import (
    ROLE_SYSTEM,
    ROLE_USER,
    ChatMessage,
    ChatMessagePart,
    FunctionCall,
    ToolCall,
    count_message,
    drop_messages_over_count,
)


def test_count_empty_message():
    assert count_message(ChatMessage()) == 0


def test_count_tool_call_matches_content():
    by_content = ChatMessage(content="abcdef")
    by_tool = ChatMessage(tool_calls=[ToolCall(function=FunctionCall(name="abc", arguments="def"))])
    assert count_message(by_content) == count_message(by_tool)


def test_count_multi_content_matches_content():
    plain = ChatMessage(role=ROLE_USER, content="hello world, how are you")
    parts = ChatMessage(role=ROLE_USER, multi_content=[ChatMessagePart(text="hello world, how are you")])
    assert count_message(plain) == count_message(parts)


def test_count_uses_bytes():
    assert count_message(ChatMessage(content="\u00e9" * 3)) == count_message(ChatMessage(content="abcdef"))


def test_count_grows_with_content():
    short = ChatMessage(role=ROLE_USER, content="x" * 10)
    long = ChatMessage(role=ROLE_USER, content="x" * 100)
    assert count_message(long) > count_message(short)


def test_large_budget_keeps_everything():
    msgs = [ChatMessage(role=ROLE_SYSTEM, content="s")] + [
        ChatMessage(role=ROLE_USER, content=f"message {n}") for n in range(5)
    ]
    assert drop_messages_over_count(0, msgs) == msgs


def test_small_budget_drops_oldest_keeps_system():
    system = ChatMessage(role=ROLE_SYSTEM, content="s")
    users = [ChatMessage(role=ROLE_USER, content=str(n) * 30) for n in range(4)]
    msgs = [system] + users
    result = drop_messages_over_count(10, msgs)
    assert result == [system] + msgs[2:]
    assert result[0] is system
    assert result[-1] is msgs[-1]


def test_dropping_all_returns_original():
    msgs = [ChatMessage(role=ROLE_SYSTEM, content="s"), ChatMessage(role=ROLE_USER, content="y" * 600)]
    assert drop_messages_over_count(1, msgs) == msgs


def test_single_and_empty():
    single = [ChatMessage(role=ROLE_USER, content="hi")]
    assert drop_messages_over_count(5, single) == single
    assert drop_messages_over_count(5, []) == []


def test_without_system_first_message_is_not_kept():
    msgs = [ChatMessage(role=ROLE_USER, content=f"m{n}") for n in range(3)]
    assert drop_messages_over_count(0, msgs) == msgs[1:]