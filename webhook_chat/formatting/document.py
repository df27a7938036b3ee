"""格式化结果的文档树。

FormattedDocument 由若干块节点组成：

- Paragraph: 段落，内含行内节点（Text / LineBreak / Bold）。
- ListBlock: 无序列表，每一项是一串行内节点。
- Table: 表格，可选表头行 + 若干数据行，每个单元格是一串行内节点。

所有节点均为不可变 dataclass，文本节点保存原始（未转义）文本，
转义在渲染阶段统一完成。
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class LineBreak:
    pass


@dataclass(frozen=True)
class Bold:
    children: Tuple["Inline", ...]


Inline = Union[Text, LineBreak, Bold]
InlineSeq = Tuple[Inline, ...]


@dataclass(frozen=True)
class Paragraph:
    children: InlineSeq


@dataclass(frozen=True)
class ListBlock:
    items: Tuple[InlineSeq, ...]


@dataclass(frozen=True)
class Table:
    header: Optional[Tuple[InlineSeq, ...]]
    rows: Tuple[Tuple[InlineSeq, ...], ...]


Block = Union[Paragraph, ListBlock, Table]


@dataclass(frozen=True)
class FormattedDocument:
    blocks: Tuple[Block, ...] = ()

    @property
    def empty(self) -> bool:
        return not self.blocks
