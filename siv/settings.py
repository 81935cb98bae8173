from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SivSettings(BaseSettings):
    """Settings for turning a source file into a cell grid and an image."""

    model_config = SettingsConfigDict(env_prefix="SIV_")

    banner: bool = Field(
        True,
        description=(
            "Write the SOURCE / IS / VIEW banner into the top right corner of "
            "the grid when the first rows leave room for it."
        ),
    )
    include_imports: bool = Field(
        False,
        description="Emit an IMPORT entity for every import declaration.",
    )
    cell_size: int = Field(
        32, gt=0, description="Edge length of one drawn cell, in pixels."
    )
    font_path: Optional[str] = Field(
        None,
        description=(
            "TrueType font used to draw cell text. Falls back to the Pillow "
            "default font when unset or unloadable."
        ),
    )
    tiles_dir: Optional[str] = Field(
        None,
        description=(
            'Directory with pre-rendered cell tiles named "<TOKEN>.png". '
            "Tokens without a tile are drawn as text."
        ),
    )
    log_level: str = Field("WARNING", description="Level of the `siv` logger.")
