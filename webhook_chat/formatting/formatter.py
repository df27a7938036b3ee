"""回复文本 → 安全 HTML 的格式化器。

处理顺序固定：

1. HTML 转义（渲染阶段统一完成，解析阶段使用的 - • * | 字符不受转义影响）。
2. 按空行（两个换行）切分段落，段内单个换行变为 <br>。
3. 整段只有一行且以 - 或 • 开头的段落变为列表项，相邻列表项合并为一个列表。
4. **加粗**：非贪婪，从左到右配对，未配对的 ** 原样保留。
5. 表格（启发式）：全文同时包含 | 与段内换行时触发；含 | 的行为候选行，
   只由 |、- 和空白组成的分隔行被丢弃；候选行少于两行时不转换。

格式化器是纯函数：同样的输入总是得到同样的输出，且对任何文本都不会抛异常。
"""

import html
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from webhook_chat.formatting.document import (
    Block,
    Bold,
    FormattedDocument,
    Inline,
    InlineSeq,
    LineBreak,
    ListBlock,
    Paragraph,
    Table,
    Text,
)

PARAGRAPH_SEPARATOR = "\n\n"
LINE_SEPARATOR = "\n"
PIPE = "|"

_BULLET = re.compile(r"[-•]\s*(.*)", re.DOTALL)
_BOLD = re.compile(r"\*\*(.*?)\*\*", re.DOTALL)
_SEPARATOR_LINE = re.compile(r"[\s|\-]+")


@dataclass
class _RawParagraph:
    lines: List[str]


@dataclass
class _RawList:
    items: List[str] = field(default_factory=list)


@dataclass
class _RawTable:
    header: Optional[List[str]]
    rows: List[List[str]]


_RawBlock = Union[_RawParagraph, _RawList, _RawTable]


def format_message(raw: str) -> str:
    """把原始回复文本转换为安全的 HTML 片段。"""

    return render_html(parse_message(raw))


def parse_message(raw: str) -> FormattedDocument:
    """把原始回复文本解析为 FormattedDocument。"""

    text = "" if raw is None else str(raw)
    if not text:
        return FormattedDocument()
    blocks = _split_blocks(text)
    if PIPE in text and _has_line_break(blocks):
        blocks = _convert_tables(blocks)
    return FormattedDocument(blocks=tuple(_build_block(b) for b in blocks))


def _split_blocks(text: str) -> List[_RawBlock]:
    blocks: List[_RawBlock] = []
    for segment in text.split(PARAGRAPH_SEPARATOR):
        match = _BULLET.fullmatch(segment) if LINE_SEPARATOR not in segment else None
        if match is None:
            blocks.append(_RawParagraph(lines=segment.split(LINE_SEPARATOR)))
            continue
        if blocks and isinstance(blocks[-1], _RawList):
            blocks[-1].items.append(match.group(1))
        else:
            blocks.append(_RawList(items=[match.group(1)]))
    return blocks


def _has_line_break(blocks: List[_RawBlock]) -> bool:
    return any(isinstance(b, _RawParagraph) and len(b.lines) > 1 for b in blocks)


def _is_separator(line: str) -> bool:
    return _SEPARATOR_LINE.fullmatch(line) is not None


def split_cells(line: str) -> List[str]:
    """按 | 切分单元格，去掉首尾空单元格（来自行首/行尾的 |）。"""

    cells = [cell.strip() for cell in line.split(PIPE)]
    while cells and not cells[0]:
        cells.pop(0)
    while cells and not cells[-1]:
        cells.pop()
    return cells


def _build_table(candidates: List[str]) -> Optional[_RawTable]:
    lines = [line for line in candidates if not _is_separator(line)]
    if not lines:
        return None
    header_cells = split_cells(lines[0])
    header = header_cells if any(header_cells) else None
    rows = []
    for line in lines[1:]:
        cells = split_cells(line)
        if any(cells):
            rows.append(cells)
    if header is None and not rows:
        return None
    return _RawTable(header=header, rows=rows)


def _convert_tables(blocks: List[_RawBlock]) -> List[_RawBlock]:
    candidates = [
        line
        for b in blocks
        if isinstance(b, _RawParagraph)
        for line in b.lines
        if PIPE in line
    ]
    # 候选行不足两行时放弃转换
    if len(candidates) < 2:
        return blocks
    table = _build_table(candidates)
    if table is None:
        return blocks

    result: List[_RawBlock] = []
    placed = False
    for b in blocks:
        if not isinstance(b, _RawParagraph) or not any(PIPE in line for line in b.lines):
            result.append(b)
            continue
        if placed:
            rest = [line for line in b.lines if PIPE not in line]
            if rest:
                result.append(_RawParagraph(lines=rest))
            continue
        first = next(i for i, line in enumerate(b.lines) if PIPE in line)
        before = b.lines[:first]
        after = [line for line in b.lines[first:] if PIPE not in line]
        if before:
            result.append(_RawParagraph(lines=before))
        result.append(table)
        if after:
            result.append(_RawParagraph(lines=after))
        placed = True
    return result


def _build_block(raw: _RawBlock) -> Block:
    if isinstance(raw, _RawList):
        return ListBlock(items=tuple(parse_inline(item) for item in raw.items))
    if isinstance(raw, _RawTable):
        header = tuple(parse_inline(c) for c in raw.header) if raw.header is not None else None
        rows = tuple(tuple(parse_inline(c) for c in row) for row in raw.rows)
        return Table(header=header, rows=rows)
    return Paragraph(children=parse_inline(LINE_SEPARATOR.join(raw.lines)))


def parse_inline(text: str) -> InlineSeq:
    """解析行内内容：**加粗** 与换行。"""

    nodes: List[Inline] = []
    pos = 0
    for match in _BOLD.finditer(text):
        nodes.extend(_line_nodes(text[pos:match.start()]))
        nodes.append(Bold(children=tuple(_line_nodes(match.group(1)))))
        pos = match.end()
    nodes.extend(_line_nodes(text[pos:]))
    return tuple(nodes)


def _line_nodes(text: str) -> List[Inline]:
    nodes: List[Inline] = []
    for i, line in enumerate(text.split(LINE_SEPARATOR)):
        if i:
            nodes.append(LineBreak())
        if line:
            nodes.append(Text(line))
    return nodes


def render_html(doc: FormattedDocument) -> str:
    """把 FormattedDocument 渲染为 HTML 字符串。"""

    return "".join(_render_block(b) for b in doc.blocks)


def _render_block(block: Block) -> str:
    if isinstance(block, ListBlock):
        items = "".join(f"<li>{_render_inline(item)}</li>" for item in block.items)
        return f"<ul>{items}</ul>"
    if isinstance(block, Table):
        parts = ["<table>"]
        if block.header is not None:
            parts.append(_render_row(block.header, "th"))
        parts.extend(_render_row(row, "td") for row in block.rows)
        parts.append("</table>")
        return "".join(parts)
    return f"<p>{_render_inline(block.children)}</p>"


def _render_row(cells: Tuple[InlineSeq, ...], tag: str) -> str:
    body = "".join(f"<{tag}>{_render_inline(cell)}</{tag}>" for cell in cells)
    return f"<tr>{body}</tr>"


def _render_inline(nodes: InlineSeq) -> str:
    out = []
    for node in nodes:
        if isinstance(node, LineBreak):
            out.append("<br>")
        elif isinstance(node, Bold):
            out.append(f"<strong>{_render_inline(node.children)}</strong>")
        else:
            out.append(html.escape(node.value, quote=False))
    return "".join(out)
