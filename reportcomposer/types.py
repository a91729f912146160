from __future__ import annotations

from datetime import date
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, ser_json_bytes='base64', val_json_bytes='base64')


# ---------------------------------------------------------------------------
# Content model
# ---------------------------------------------------------------------------


class ImageSource(_Frozen):
    data: bytes | None = None
    reference: str | None = None

    @model_validator(mode='after')
    def _exactly_one(self) -> 'ImageSource':
        if (self.data is None) == (self.reference is None):
            raise ValueError('image source needs exactly one of data or reference')
        return self

    def describe(self) -> str:
        if self.reference is not None:
            return self.reference
        return f'<{len(self.data or b"")} bytes>'


class Heading(_Frozen):
    kind: Literal['heading'] = 'heading'
    level: Literal[1, 2] = 1
    text: str
    decoration: Literal['banner', 'plain'] = 'plain'
    banner_color: str = '#34495E'


class KeyValueTable(_Frozen):
    kind: Literal['key_value'] = 'key_value'
    rows: tuple[tuple[str, str], ...] = ()


class ColumnHint(_Frozen):
    width: float | None = Field(default=None, gt=0)
    align: Literal['left', 'center', 'right'] = 'left'


class DataTable(_Frozen):
    kind: Literal['data_table'] = 'data_table'
    header: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...] = ()
    column_hints: tuple[ColumnHint, ...] | None = None
    header_color: str = '#3B82F6'


class BulletList(_Frozen):
    kind: Literal['bullets'] = 'bullets'
    items: tuple[str, ...] = ()


class Paragraph(_Frozen):
    kind: Literal['paragraph'] = 'paragraph'
    text: str
    emphasis: Literal['normal', 'bold', 'italic'] = 'normal'


class Image(_Frozen):
    kind: Literal['image'] = 'image'
    source: ImageSource
    caption: str = ''
    target_width: float


class SignatureBlock(_Frozen):
    kind: Literal['signature'] = 'signature'
    place: str
    date: str
    label: str = 'Signature'


class Rule(_Frozen):
    kind: Literal['rule'] = 'rule'


Block = Annotated[
    Union[Heading, KeyValueTable, DataTable, BulletList, Paragraph, Image, SignatureBlock, Rule],
    Field(discriminator='kind'),
]


class HeaderMeta(_Frozen):
    organization: str
    logo: ImageSource | None = None
    generated_on: date


class Document(_Frozen):
    title: str
    report_kind: str = 'Report'
    header: HeaderMeta
    blocks: tuple[Block, ...] = ()


# ---------------------------------------------------------------------------
# Output: absolute draw commands, origin top-left, y grows downwards
# ---------------------------------------------------------------------------

Role = Literal['content', 'header', 'footer']


class TextStyle(_Frozen):
    font: str = 'Helvetica'
    size: float = 10.0
    color: str = '#000000'
    align: Literal['left', 'center', 'right'] = 'left'


class DrawText(_Frozen):
    op: Literal['text'] = 'text'
    role: Role = 'content'
    x: float
    y: float
    text: str
    style: TextStyle = Field(default_factory=TextStyle)


class DrawRule(_Frozen):
    op: Literal['rule'] = 'rule'
    role: Role = 'content'
    x: float
    y: float
    w: float
    h: float
    color: str = '#000000'


class DrawBox(_Frozen):
    op: Literal['box'] = 'box'
    role: Role = 'content'
    x: float
    y: float
    w: float
    h: float
    color: str = '#C8C8C8'
    dashed: bool = False


class DrawImage(_Frozen):
    op: Literal['image'] = 'image'
    role: Role = 'content'
    x: float
    y: float
    w: float
    h: float
    data: bytes


class DrawTableCell(_Frozen):
    op: Literal['cell'] = 'cell'
    role: Role = 'content'
    x: float
    y: float
    w: float
    h: float
    lines: tuple[str, ...]
    style: TextStyle = Field(default_factory=TextStyle)
    fill: str | None = None
    header: bool = False


DrawCommand = Annotated[
    Union[DrawText, DrawRule, DrawBox, DrawImage, DrawTableCell],
    Field(discriminator='op'),
]


class RenderedPage(BaseModel):
    model_config = ConfigDict(ser_json_bytes='base64', val_json_bytes='base64')

    number: int = Field(ge=1)
    commands: list[DrawCommand] = Field(default_factory=list)

    def content(self) -> list[DrawCommand]:
        return [cmd for cmd in self.commands if cmd.role == 'content']

    @property
    def has_header(self) -> bool:
        return any(cmd.role == 'header' for cmd in self.commands)

    @property
    def has_footer(self) -> bool:
        return any(cmd.role == 'footer' for cmd in self.commands)

    def texts(self) -> list[str]:
        rows: list[str] = []
        for cmd in self.commands:
            if isinstance(cmd, DrawText):
                rows.append(cmd.text)
            elif isinstance(cmd, DrawTableCell):
                rows.extend(cmd.lines)
        return rows
