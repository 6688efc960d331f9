from typing import Any, Optional, List, Union, Dict, Iterable

from rich import box
from rich.console import Console, Group
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.align import Align


COLOR_SYSTEM = "grey62"                      # 系统信息 - 暗灰色
COLOR_SUCCESS = "bright_green"               # 成功状态 - 亮绿色
COLOR_ERROR = "bright_red"                   # 错误信息 - 亮红色
COLOR_WARNING = "bright_yellow"              # 警告信息 - 亮黄色
COLOR_INFO = "grey50"                        # 一般信息 - 暗灰色（低调显示）
COLOR_BORDER = "dim cyan"                    # 边框颜色 - 青色

# Agent 步骤状态配色
STEP_STATUS_COLORS = {
    "running": COLOR_WARNING,
    "done": COLOR_SUCCESS,
    "error": COLOR_ERROR,
}


class Printer:
    def __init__(self, console: Optional[Console] = None):
        """
        富文本终端打印机
        :param console: 可传入自定义的Rich Console实例(测试时可传入 record=True 的 Console)
        """
        self.console = console or Console()

    def print_table(
            self, data: Iterable[Iterable[Any]], title: Optional[str] = None, headers: Optional[List[str]] = None,
            show_lines: bool = False, expand: bool = False, caption: Optional[str] = None
    ) -> None:
        """
        打印表格
        :param data: 二维可迭代数据
        :param title: 表格标题
        :param headers: 列标题列表
        :param show_lines: 是否显示行分隔线
        :param expand: 是否扩展表格宽度
        :param caption: 底部说明文字
        """
        table = Table(
            title=title, show_header=bool(headers), show_lines=show_lines, expand=expand,
            caption=caption, padding=(0, 1)
        )

        if headers:
            for header in headers:
                table.add_column(header, style="cyan", header_style="bold magenta")

        for row in data:
            styled_row = [str(item) if not isinstance(item, Text) else item for item in row]
            table.add_row(*styled_row)

        self.console.print(table)

    def print_markdown(self, text: str, panel: bool = False, title: Optional[str] = None) -> None:
        """打印Markdown文本"""
        md = Markdown(text)
        self._print_with_panel(md, panel, title)

    def print_panel(
        self, content: Any, title: Optional[str] = None, border_style: str = COLOR_BORDER,
        width: Optional[int] = None, padding: tuple = (0, 1), center: bool = False
    ) -> None:
        """带边框的面板输出"""
        renderable = content
        if center:
            renderable = Align.center(content, width=width)

        panel = Panel(
            renderable,
            title=title,
            border_style=border_style,
            width=width,
            padding=padding,
            box=box.DOUBLE,
            expand=True
        )
        self.console.print(panel)

    def print_text(
            self, *texts: Union[str, Text], style: Optional[str] = None, justify: Optional[str] = "left",
            prefix: Optional[str] = "> "
    ) -> None:
        """灵活文本打印，支持样式和混合内容"""
        processed_texts = Text()
        if prefix:
            processed_texts.append(Text(prefix, style="sandy_brown"))
        for t in texts:
            processed_texts.append(Text(str(t), style=style) if isinstance(t, str) else t)
        self.console.print(processed_texts, justify=justify)

    def print_key_value(
            self, items: Dict[str, Any], key_style: str = "bold cyan",
            value_style: str = "green", separator: str = ": ", panel: bool = True, title: Optional[str] = None
    ) -> None:
        """
        键值对格式化输出
        :param items: 字典数据
        :param key_style: 键的样式
        :param value_style: 值的样式
        :param separator: 键值分隔符
        :param panel: 是否用面板包裹
        :param title: 面板标题
        """
        content = Group(*[
            Text.assemble(
                (f"{k}{separator}", key_style),
                (str(v), value_style)
            ) for k, v in items.items()
        ])
        self._print_with_panel(content, panel, title)

    def print_llm_output(self, content: str, style: str = COLOR_INFO):
        md = Panel(
            Markdown(
                content, style=style
            ),
            padding=(0, 0, 0, 6),
            expand=True,
            box=box.SIMPLE_HEAD
        )
        self.console.print(md)

    def _print_with_panel(self, content: Any, use_panel: bool, title: Optional[str] = None) -> None:
        """内部方法：根据参数决定是否使用面板包装"""
        if use_panel:
            self.print_panel(content, title)
        else:
            self.console.print(content)
