from dataclasses import dataclass, asdict
from enum import Enum, Flag
from typing import Any, Dict, Optional, Tuple, Type, TypeVar
import numpy as np
from inksplit.kernel.errors import InvalidInputError, UnsupportedChannelSelectionError
from inksplit.kernel.system.config import APP_CONFIG


class ChannelKind(Flag):
    """
    CMYK ink plates. Members combine with ``|`` into a channel selection.
    """

    NONE = 0
    CYAN = 1
    MAGENTA = 2
    YELLOW = 4
    BLACK = 8
    ALL = CYAN | MAGENTA | YELLOW | BLACK

    @property
    def channel_name(self) -> str:
        return CHANNEL_NAMES[self]

    @property
    def index(self) -> int:
        return CMYK_ORDER.index(self)

    def members(self) -> Tuple["ChannelKind", ...]:
        """Selected plates in canonical C, M, Y, K order."""
        return tuple(kind for kind in CMYK_ORDER if kind in self)

    @classmethod
    def parse(cls, text: str) -> "ChannelKind":
        """
        Accepts letters ("cmyk", "ck") or comma separated names ("cyan,black").
        """
        selection = cls.NONE
        text = text.strip().lower()
        if not text:
            return selection

        tokens = [t.strip() for t in text.split(",")] if "," in text else None
        if tokens is None:
            tokens = [text] if text in _BY_NAME else list(text)

        for token in tokens:
            kind = _BY_NAME.get(token) or _BY_LETTER.get(token)
            if kind is None:
                raise UnsupportedChannelSelectionError(
                    f"Unsupported channel selection: {token!r}"
                )
            selection |= kind
        return selection


CMYK_ORDER: Tuple[ChannelKind, ...] = (
    ChannelKind.CYAN,
    ChannelKind.MAGENTA,
    ChannelKind.YELLOW,
    ChannelKind.BLACK,
)

CHANNEL_NAMES: Dict[ChannelKind, str] = {
    ChannelKind.CYAN: "cyan",
    ChannelKind.MAGENTA: "magenta",
    ChannelKind.YELLOW: "yellow",
    ChannelKind.BLACK: "black",
}

_BY_NAME = {name: kind for kind, name in CHANNEL_NAMES.items()}
_BY_LETTER = {
    "c": ChannelKind.CYAN,
    "m": ChannelKind.MAGENTA,
    "y": ChannelKind.YELLOW,
    "k": ChannelKind.BLACK,
}


class RgbChannel(Flag):
    NONE = 0
    RED = 1
    GREEN = 2
    BLUE = 4
    ALL = RED | GREEN | BLUE

    def members(self) -> Tuple["RgbChannel", ...]:
        return tuple(c for c in RGB_ORDER if c in self)


RGB_ORDER: Tuple[RgbChannel, ...] = (RgbChannel.RED, RgbChannel.GREEN, RgbChannel.BLUE)


E = TypeVar("E", bound="_ParsableEnum")


class _ParsableEnum(Enum):
    @classmethod
    def parse(cls: Type[E], value: Any) -> E:
        """
        Case-insensitive lookup by value or member name.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for member in cls:
            if key in (member.value.lower(), member.name.lower()):
                return member
        raise InvalidInputError(f"Unknown {cls.__name__}: {value!r}")


class EffectKind(_ParsableEnum):
    """Per-plate print effects."""

    ORIGINAL = "Original"
    DITHER = "Dither"
    HALFTONE = "HalfTone"
    THRESHOLD = "Threshold"
    POSTERIZE = "Posterize"


class FilterKind(_ParsableEnum):
    """Composite image filters, applied before separation."""

    GRAYSCALE = "Grayscale"
    SEPIA = "Sepia"
    INVERT = "Invert"
    PIXELATE = "Pixelate"
    BRIGHTEN = "Brighten"
    DARKEN = "Darken"
    CONTRAST = "Contrast"
    BLUR = "Blur"
    SHARPEN = "Sharpen"


class ProcessingStatus(Enum):
    IDLE = "Idle"
    PROCESSING = "Processing"
    COMPLETED = "Completed"
    FAILED = "Failed"


@dataclass(frozen=True)
class ProcessSettings:
    """
    Settings for one pipeline run. A field left as None skips its stage.
    """

    colors: Optional[Tuple[str, ...]] = None
    effect: Optional[EffectKind] = None
    filter: Optional[FilterKind] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "colors": list(self.colors) if self.colors is not None else None,
            "effect": self.effect.value if self.effect else None,
            "filter": self.filter.value if self.filter else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProcessSettings":
        """
        from host JSON.
        """
        colors = data.get("colors")
        effect = data.get("effect")
        filter_kind = data.get("filter")
        return cls(
            colors=tuple(str(c) for c in colors) if colors is not None else None,
            effect=EffectKind.parse(effect) if effect is not None else None,
            filter=FilterKind.parse(filter_kind) if filter_kind is not None else None,
        )


@dataclass(frozen=True)
class ChannelPlate:
    """
    A separated plate held in memory.
    """

    kind: ChannelKind
    image: np.ndarray

    @property
    def channel(self) -> str:
        return self.kind.channel_name

    @property
    def index(self) -> int:
        return self.kind.index


@dataclass(frozen=True)
class ChannelResult:
    """
    A persisted plate: canonical channel name and where it was written.
    """

    channel: str
    image_path: str
    index: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ExportConfig:
    """
    Export parameters (path, format, quality).
    """

    export_path: str = APP_CONFIG.default_export_dir
    export_fmt: str = "JPEG"
    jpeg_quality: int = APP_CONFIG.jpeg_quality
