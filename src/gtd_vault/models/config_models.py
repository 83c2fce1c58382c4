"""Configuration models for GTD Vault.

The whole configuration is an explicit value handed to the gateway and the
services; nothing below reads ambient state.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_TEMPLATE_NAMES = ["temp_task.md", "temp_project.md", "temp_review.md"]


class FolderConfig(BaseModel):
    """Vault-relative folder layout."""

    task_folder: str = Field(default="GTD/Tasks")
    project_folder: str = Field(default="GTD/Projects")
    review_folder: str = Field(default="GTD/Reviews")
    completed_folder_name: str = Field(default="completed")
    trash_folder_name: str = Field(default="trash")
    template_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TEMPLATE_NAMES)
    )

    @field_validator("task_folder", "project_folder", "review_folder")
    @classmethod
    def normalize_folder(cls, v: str) -> str:
        """Strip surrounding slashes and use forward slashes."""
        v = v.replace("\\", "/").strip().strip("/")
        if not v:
            raise ValueError("folder cannot be empty")
        return v


class UIConfig(BaseModel):
    """Presentation preferences that influence service behaviour."""

    task_sort_mode: Literal["manual", "auto"] = Field(default="manual")
    date_format: str = Field(default="%Y-%m-%d")
    language: Literal["en", "ja"] = Field(default="en")
    week_start_day: Literal["sunday", "monday"] = Field(default="monday")


class DailyNoteConfig(BaseModel):
    """Where completed tasks are logged in daily notes."""

    mode: Literal["command", "auto-write"] = Field(
        default="command",
        description="auto-write also logs each task the moment it is completed",
    )
    folder: str = Field(default="", description="Vault-relative folder; empty for the vault root")
    date_format: str = Field(default="%Y-%m-%d", description="strftime pattern for note names")

    @field_validator("folder")
    @classmethod
    def normalize_folder(cls, v: str) -> str:
        return v.replace("\\", "/").strip().strip("/")


class AppConfig(BaseModel):
    """Main GTD Vault configuration."""

    vault_path: str = Field(default=".", description="Root folder of the vault")
    folders: FolderConfig = Field(default_factory=FolderConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    daily_notes: DailyNoteConfig = Field(default_factory=DailyNoteConfig)
    default_priority: Literal["low", "medium", "high"] = Field(default="medium")
    project_tasks_heading: str = Field(default="## Tasks")

    @field_validator("vault_path")
    @classmethod
    def validate_vault_path(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("vault_path cannot be empty")
        return v.strip()
