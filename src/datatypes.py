"""Configuration dataclasses for image conversion."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Type, Union


class ColorName(str, Enum):
    """Named colours accepted for background fills."""

    WHITE = "white"
    BLACK = "black"
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    YELLOW = "yellow"
    CYAN = "cyan"
    MAGENTA = "magenta"

    @classmethod
    def parse(cls, value: str) -> Optional["ColorName"]:
        """Return the colour called ``value`` (case-insensitive), or None."""

        normalized = str(value).strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return None


class InterlaceType(str, Enum):
    """Interlacing schemes reported by identification and requested on output."""

    UNDEFINED = "undefined"
    NONE = "none"
    LINE = "line"
    PLANE = "plane"
    PARTITION = "partition"
    GIF = "gif"
    JPEG = "jpeg"
    PNG = "png"


class OutputFormat(str, Enum):
    """Supported output formats."""

    BMP = "bmp"
    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"
    WEBP = "webp"
    TIFF = "tiff"
    ICO = "ico"
    PGM = "pgm"
    GRAY_RAW = "gray_raw"


@dataclass(frozen=True)
class CenterCrop:
    """Crop to ``ratio_w:ratio_h`` around the image centre."""

    ratio_w: float
    ratio_h: float


Crop = CenterCrop


@dataclass
class ImageConfig:
    """Options shared by every output format.

    ``width``/``height`` of ``None`` (or ``0``) keep the original value for
    that axis; ``sharpen`` of ``None`` (or any negative value) derives the
    amount from the resize.
    """

    width: Optional[int] = None
    height: Optional[int] = None
    crop: Optional[CenterCrop] = None
    shrink_only: bool = True
    sharpen: Optional[float] = None
    remain_profile: bool = False
    respect_orientation: bool = False
    background_color: Optional[ColorName] = None
    ppi: Optional[float] = 72.0
    vector_raster_shrink: bool = True


@dataclass
class BMPConfig(ImageConfig):
    """BMP output options."""


@dataclass
class JPGConfig(ImageConfig):
    """JPEG output options."""

    quality: int = 85
    force_to_chroma_quartered: bool = True


@dataclass
class PNGConfig(ImageConfig):
    """PNG output options; ``compression_level`` follows the 0–2 scale."""

    compression_level: int = 2


@dataclass
class GIFConfig(ImageConfig):
    """GIF output options."""

    ppi: Optional[float] = None


@dataclass
class WEBPConfig(ImageConfig):
    """WEBP output options."""

    quality: int = 85
    ppi: Optional[float] = None


@dataclass
class TIFFConfig(ImageConfig):
    """TIFF output options."""


@dataclass
class PGMConfig(ImageConfig):
    """PGM (binary portable graymap) output options."""

    ppi: Optional[float] = None


@dataclass
class GrayRawConfig(ImageConfig):
    """Headerless 8-bit grayscale output options. Never sharpened."""

    sharpen: Optional[float] = 0.0
    ppi: Optional[float] = None


@dataclass
class ICOConfig:
    """ICO output options; every entry of ``sizes`` becomes one icon frame."""

    sizes: List[Tuple[int, int]] = field(default_factory=list)
    sharpen: Optional[float] = None
    remain_profile: bool = False
    respect_orientation: bool = False
    vector_raster_shrink: bool = True

    def size_configs(self) -> List[ImageConfig]:
        """Return one enlargement-capable config per requested icon size."""

        return [
            ImageConfig(
                width=width,
                height=height,
                shrink_only=False,
                sharpen=self.sharpen,
                remain_profile=self.remain_profile,
                respect_orientation=self.respect_orientation,
                ppi=None,
                vector_raster_shrink=self.vector_raster_shrink,
            )
            for width, height in self.sizes
        ]


FormatConfig = Union[ImageConfig, ICOConfig]


FORMAT_CONFIGS: Dict[OutputFormat, Type[FormatConfig]] = {
    OutputFormat.BMP: BMPConfig,
    OutputFormat.JPEG: JPGConfig,
    OutputFormat.PNG: PNGConfig,
    OutputFormat.GIF: GIFConfig,
    OutputFormat.WEBP: WEBPConfig,
    OutputFormat.TIFF: TIFFConfig,
    OutputFormat.ICO: ICOConfig,
    OutputFormat.PGM: PGMConfig,
    OutputFormat.GRAY_RAW: GrayRawConfig,
}


@dataclass
class ConversionConfig:
    """A target format together with its options."""

    format: OutputFormat = OutputFormat.PNG
    options: FormatConfig = field(default_factory=PNGConfig)
