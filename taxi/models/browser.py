"""Browser identity derived from the session capabilities."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Capabilities(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    browser_name: str = Field(default="", validation_alias=AliasChoices("browser_name", "browserName", "browser"))
    browser_version: str = Field(default="", validation_alias=AliasChoices("browser_version", "browserVersion", "version"))
    platform: str = Field(default="", validation_alias=AliasChoices("platform", "platformName"))
    device_name: str = Field(default="", validation_alias=AliasChoices("device_name", "deviceName", "device-name"))
    device_orientation: str = Field(
        default="", validation_alias=AliasChoices("device_orientation", "deviceOrientation", "device-orientation")
    )

    def browser_id(self) -> str:
        """Identifier of browser (+ version) and platform, e.g. ``chrome41.0 (Windows 8.1)``."""
        name = self.device_name or self.browser_name
        name += self.browser_version
        details = [d for d in (self.platform, self.device_orientation) if d]
        if details:
            name += " (" + " - ".join(details) + ")"
        return name

    def numeric_version(self) -> float | None:
        """Numeric browser version, or None when it is not a number."""
        head = self.browser_version.strip().split(" ")[0]
        parts = head.split(".")
        try:
            if len(parts) > 1:
                return float(f"{parts[0]}.{parts[1]}")
            return float(parts[0])
        except ValueError:
            return None
