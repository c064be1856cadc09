"""
Filesystem storage for label templates.
One JSON file per template, named after the template.
"""

import hashlib
import json
import re
from pathlib import Path

from labelprint.logger import get_logger
from labelprint.models.template import Template

logger = get_logger(__name__)


class TemplateNotFoundError(Exception):
    """No template stored under the requested name."""
    pass


class TemplateStore:
    """Reads and writes templates in a local directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    @staticmethod
    def sanitize_name(name: str) -> str:
        """
        Turn a template name into a safe file stem.

        Strips path components and keeps letters, digits, spaces,
        hyphens and underscores.

        Example:
            >>> TemplateStore.sanitize_name("../Shelf label: A/B")
            'B'
        """
        name = Path(name.replace("\\", "/")).name
        safe = re.sub(r"[^A-Za-z0-9 _-]", "_", name).strip(" .")
        return safe[:200] or "unnamed"

    @classmethod
    def file_stem(cls, name: str) -> str:
        """
        File stem for a template name, unique per name.

        A name that is already a safe stem is used as is. Any other name
        gets a short hash of the original appended, so names that sanitize
        alike ("Shelf: A", "Shelf? A") never share a file.

        Example:
            >>> TemplateStore.file_stem("Shelf Label")
            'Shelf Label'
        """
        safe = cls.sanitize_name(name)
        if safe == name:
            return safe
        digest = hashlib.sha256(name.encode("utf-8")).hexdigest()[:8]
        return f"{safe}-{digest}"

    def path_for(self, name: str) -> Path:
        return self.directory / f"{self.file_stem(name)}.json"

    def list_templates(self) -> list[Template]:
        """All stored templates sorted by name. Unreadable files are skipped."""
        if not self.directory.is_dir():
            return []

        templates = []
        for path in sorted(self.directory.glob("*.json")):
            try:
                templates.append(Template.model_validate_json(path.read_text(encoding="utf-8")))
            except (OSError, ValueError) as e:
                logger.warning("Skipping unreadable template file", extra={
                    "path": str(path),
                    "error": str(e)
                })

        return sorted(templates, key=lambda t: t.name.lower())

    def get_template(self, name: str) -> Template:
        path = self.path_for(name)
        if not path.is_file():
            raise TemplateNotFoundError(f"Template not found: {name}")
        return Template.model_validate_json(path.read_text(encoding="utf-8"))

    def save_template(self, template: Template) -> Path:
        """Write a template, replacing any existing one with the same name."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(template.name)
        path.write_text(json.dumps(template.to_wire(), indent=2), encoding="utf-8")

        logger.info("Template saved", extra={
            "template": template.name,
            "path": str(path),
            "elements": len(template.elements)
        })

        return path

    def delete_template(self, name: str) -> None:
        path = self.path_for(name)
        if not path.is_file():
            raise TemplateNotFoundError(f"Template not found: {name}")
        path.unlink()

        logger.info("Template deleted", extra={"template": name, "path": str(path)})
