"""GTD Vault - task and project workflow engine over a folder of markdown documents."""

__version__ = "0.4.0"
