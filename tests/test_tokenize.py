import pytest

from botguard.text.tokenize import (
    CommandSpec,
    format_command,
    parse_command_args,
    quote_argument,
    split_command,
    tokenize,
)


def test_splits_on_spaces_and_keeps_quoted_spaces():
    assert tokenize('node server.js --name "My App"') == [
        "node",
        "server.js",
        "--name",
        "My App",
    ]


def test_trailing_windows_backslash_is_preserved():
    assert tokenize('"C:\\Folder\\"') == ["C:\\Folder\\"]


def test_unquoted_windows_path_keeps_backslashes():
    assert tokenize("cd C:\\Users\\me") == ["cd", "C:\\Users\\me"]


def test_empty_quotes_produce_an_empty_token():
    assert tokenize('a "" b') == ["a", "", "b"]
    assert tokenize("''") == [""]


def test_other_quote_kind_is_literal():
    assert tokenize("'say \"hi\"' x") == ['say "hi"', "x"]
    assert tokenize("\"it's\"") == ["it's"]


def test_escapes_inside_double_quotes():
    assert tokenize('"a \\"b\\" c"') == ['a "b" c']
    assert tokenize('"a\\\\b" x') == ["a\\b", "x"]
    assert tokenize('"a\\nb"') == ["a\\nb"]


def test_escapes_inside_single_quotes():
    assert tokenize("'it\\'s' x") == ["it's", "x"]
    assert tokenize("'a\\\\b'") == ["a\\b"]
    assert tokenize("'a\\\"b'") == ['a\\"b']


def test_backslash_space_joins_words():
    assert tokenize("my\\ file.txt next") == ["my file.txt", "next"]


def test_quote_in_the_middle_of_a_token_is_literal():
    assert tokenize('--name="x"') == ['--name="x"']


def test_quoted_region_continues_into_the_token():
    assert tokenize('"ab"cd ef') == ["abcd", "ef"]


def test_unterminated_quote_is_closed_at_end_of_input():
    assert tokenize('node "unterminated arg') == ["node", "unterminated arg"]
    assert tokenize("x '") == ["x", ""]


def test_repeated_and_edge_spaces_are_ignored():
    assert tokenize("  a   b  ") == ["a", "b"]
    assert tokenize("") == []
    assert tokenize("     ") == []


@pytest.mark.parametrize(
    "text",
    [
        "node server.js --port 3000",
        "npx -y @modelcontextprotocol/server-filesystem /srv/data",
        "python3   -m   http.server",
        "a",
    ],
)
def test_rejoining_plain_tokens_is_stable(text):
    tokens = tokenize(text)
    assert tokenize(" ".join(tokens)) == tokens


@pytest.mark.parametrize(
    "text",
    ['"', "'", "\\", '\\"', "\"'\"'", "\\ ", 'x"y"z\'', "\x00\n\t", '"\\'],
)
def test_malformed_input_never_raises(text):
    assert isinstance(tokenize(text), list)


def test_parse_command_args_drops_the_command_word():
    assert parse_command_args('/addproject web "C:\\My Projects\\web"') == [
        "web",
        "C:\\My Projects\\web",
    ]
    assert parse_command_args("/cd") == []


def test_split_command():
    assert split_command("npx -y pkg") == CommandSpec("npx", ["-y", "pkg"])
    assert split_command("node") == CommandSpec("node", [])
    assert split_command("   ") is None
    assert split_command("") is None


def test_quote_argument():
    assert quote_argument("server.js") == "server.js"
    assert quote_argument("My App") == '"My App"'
    assert quote_argument("C:\\x") == '"C:\\\\x"'
    assert quote_argument('say "hi"') == '"say \\"hi\\""'
    assert quote_argument('"already"') == '"already"'
    assert quote_argument("") == '""'


def test_format_command_keeps_the_executable_verbatim():
    assert format_command("C:\\node.exe", ["--name", "My App"]) == (
        'C:\\node.exe --name "My App"'
    )
    assert format_command("node") == "node"
