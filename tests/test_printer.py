from rich.console import Console

from loopcoder.utils.printer_utils import Printer


def make_printer():
    return Printer(Console(record=True, width=100, color_system=None))


def test_print_text_with_prefix():
    printer = make_printer()
    printer.print_text("hello", "world", style="green")
    assert printer.console.export_text().strip() == "> helloworld"


def test_print_table_and_key_value():
    printer = make_printer()
    printer.print_table([["/help", "显示帮助"]], title="可用命令", headers=["命令", "说明"])
    printer.print_key_value({"LoopCoder": "v0.1.0"})

    text = printer.console.export_text()
    assert "可用命令" in text
    assert "/help" in text
    assert "LoopCoder: v0.1.0" in text


def test_print_markdown_in_panel():
    printer = make_printer()
    printer.print_markdown("**Agent actions**\n\n- **terminal**: `ls` → ok", panel=True, title="工具调用")

    text = printer.console.export_text()
    assert "工具调用" in text
    assert "terminal" in text
