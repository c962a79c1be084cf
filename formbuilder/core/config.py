from pathlib import Path
import os
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root

ENV_FILE = os.getenv("ENV_FILE", str(BASE_DIR / ".env"))

# field category -> widget kind
DEFAULT_ELEMENT_TYPE_MAP: dict[str, str] = {
    "shorttext": "text",
    "longtext": "textarea",
    "integer": "text",
    "float": "text",
    "date": "date-group",
    "time": "time-group",
    "datetime": "datetime-group",
    "boolean": "checkbox",
    "select": "select",
    "multiselect": "multiselect",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")

    APP_ENV: str = "local"
    DATABASE_URL: str = "sqlite:///./formbuilder.db"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"  # comma-separated, or "*" for all

    # Defaults for auto-generated select elements and date groups
    SELECT_DISPLAY_FIELD: str | None = None
    SELECT_ORDER_FIELD: str | None = None
    DATE_ELEMENT_FORMAT: str = "d-M-Y"
    TIME_ELEMENT_FORMAT: str = "H:i"
    DATETIME_ELEMENT_FORMAT: str = "d-M-Y H:i"

    VALIDATE_ON_PROCESS: bool = False
    INVALID_DATE_POLICY: Literal["raise", "today"] = "raise"

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


settings = Settings()


class FormBuilderConfig(BaseModel):
    """
    Options consumed by introspection, inference, assembly and binding.

    Built once (usually from Settings) and passed down explicitly. Per-call
    options never mutate it; use `with_options()` to get an updated copy.
    """

    add_form_header: bool = True
    form_header_text: str | None = None
    form_name: str | None = None

    rule_violation_message: str = "The value you have entered is not valid."
    required_rule_message: str = "The field %s is required."

    submit_name: str = "__submit__"
    submit_text: str = "Submit"

    select_display_field: str | None = None
    select_order_field: str | None = None
    select_add_empty_label: str = ""

    date_element_format: str = "d-M-Y"
    time_element_format: str = "H:i"
    datetime_element_format: str = "d-M-Y H:i"

    element_type_map: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_ELEMENT_TYPE_MAP))
    element_type_attributes: dict[str, dict[str, Any]] = Field(default_factory=dict)

    validate_on_process: bool = False
    invalid_date_policy: Literal["raise", "today"] = "raise"
    # "native" keeps date objects for Date columns, "iso" forces YYYY-MM-DD strings
    date_output: Literal["native", "iso", "timestamp"] = "native"

    @classmethod
    def from_settings(cls, s: Settings) -> "FormBuilderConfig":
        return cls(
            select_display_field=s.SELECT_DISPLAY_FIELD,
            select_order_field=s.SELECT_ORDER_FIELD,
            date_element_format=s.DATE_ELEMENT_FORMAT,
            time_element_format=s.TIME_ELEMENT_FORMAT,
            datetime_element_format=s.DATETIME_ELEMENT_FORMAT,
            validate_on_process=s.VALIDATE_ON_PROCESS,
            invalid_date_policy=s.INVALID_DATE_POLICY,
        )

    def with_options(self, **options) -> "FormBuilderConfig":
        unknown = set(options) - set(type(self).model_fields)
        if unknown:
            raise ValueError(f"Unknown form builder option(s): {sorted(unknown)}")
        # element_type_map is merged so callers can remap a single category
        if "element_type_map" in options:
            options["element_type_map"] = {**self.element_type_map, **options["element_type_map"]}
        return self.model_copy(update=options, deep=True)

    def widget_kind_for(self, category: str) -> str:
        return self.element_type_map.get(category) or DEFAULT_ELEMENT_TYPE_MAP.get(category, "text")
