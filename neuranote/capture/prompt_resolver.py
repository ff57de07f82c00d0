"""
Prompt Resolver - turns the selected report type and free-form text into one instruction
"""

import logging
from pathlib import Path
from typing import Dict, List, Tuple, Union

from ..services.backend_client import BackendClient
from ..services.errors import ValidationError

# (value, label)
REPORT_TYPES: List[Tuple[str, str]] = [
    ("Standard Meeting", "Standard Report"),
    ("Visitor Report", "Visitor Report"),
    ("Site Inspection", "Site Inspection"),
]
DEFAULT_REPORT_TYPE = REPORT_TYPES[0][0]


def resolve_prompt(selected_key: str, freeform_text: str, saved_prompts: Dict[str, str]) -> str:
    """A saved prompt name is replaced by its content; anything else is used literally"""
    stem = saved_prompts.get(selected_key) or selected_key
    return f"{stem}: {freeform_text}"


class PromptLibrary:
    """Saved prompts plus a transient pool imported from a spreadsheet"""

    def __init__(self, backend_client: BackendClient):
        self.backend_client = backend_client
        self.logger = logging.getLogger(__name__)
        self.saved: Dict[str, str] = {}
        self.imported: Dict[str, str] = {}

    async def load(self) -> bool:
        """Load saved prompts; failures leave the current mapping untouched"""
        response = await self.backend_client.get_prompts()
        if not response.success:
            self.logger.error(f"Failed to load saved prompts: {response.error}")
            return False
        self.saved = response.data
        self.logger.info(f"Loaded {len(self.saved)} saved prompts")
        return True

    def options(self) -> List[Tuple[str, str, str]]:
        """(group, value, label) entries: saved prompts first, then built-in types"""
        entries = [("Saved Prompts", name, name) for name in self.saved]
        entries.extend(("Standard Types", value, label) for value, label in REPORT_TYPES)
        return entries

    def resolve(self, selected_key: str, freeform_text: str) -> str:
        return resolve_prompt(selected_key, freeform_text, self.saved)

    async def save(self, name: str, content: str) -> str:
        """Persist ``content`` under ``name`` and return the name to select"""
        name = name.strip()
        if not name:
            raise ValidationError("Prompt name is required")
        if not content.strip():
            raise ValidationError("Prompt text is empty")

        response = await self.backend_client.create_prompt(name, content)
        if not response.success:
            raise ValidationError(f"Failed to save prompt: {response.error}")
        self.saved[name] = content
        return name

    async def import_sheet(self, file_path: Union[str, Path]) -> Dict[str, str]:
        """Replace the imported pool with the prompts found in a spreadsheet"""
        response = await self.backend_client.import_prompts(file_path)
        if not response.success:
            raise ValidationError(f"Failed to import prompts: {response.error}")
        self.imported = response.data
        self.logger.info(f"Imported {len(self.imported)} prompts from {Path(file_path).name}")
        return self.imported

    def clear_imported(self):
        self.imported = {}
