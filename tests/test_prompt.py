from loopcoder.core import extract_code, format_str_jinja2, prompt


@prompt()
def greeting(name: str, polite: bool = False):
    """
    {% if polite %}Dear {% endif %}{{ name }},
    you have {{ count }} new messages.
    """
    return {"count": 3}


class Mailer:
    def __init__(self, sender):
        self.sender = sender

    @prompt()
    def signature(self, name: str):
        """
        {{ name }} via mailer
        """


def test_prompt_renders_docstring():
    assert greeting.prompt("Ada") == "Ada,\nyou have 3 new messages."
    assert greeting.prompt("Ada", polite=True) == "Dear Ada,\nyou have 3 new messages."


def test_prompt_on_methods():
    assert Mailer("x").signature.prompt("Bob") == "Bob via mailer"


def test_calling_decorated_function_runs_it():
    assert greeting("Ada") == {"count": 3}


def test_format_str_jinja2():
    assert format_str_jinja2("{{ a }}-{{ b }}", a=1, b="x") == "1-x"


def test_extract_code():
    assert extract_code("text\n```js\nlet a = 1;\n```\nmore ```py\nb\n```") == "let a = 1;"
    assert extract_code("```objective-c\nint x;\n```") == "int x;"
    assert extract_code("  no block  ") == "no block"
