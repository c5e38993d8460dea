"""
Language profile loader - parses YAML language profiles into LanguageProfile objects
"""

import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Any, Optional
import logging

from .errors import UnsupportedLanguageError

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGES_DIR = Path(__file__).parent / "languages"


@dataclass
class LanguageProfile:
    """Lexical knowledge the fact extractor and CFG builder need for one language"""
    name: str
    aliases: List[str] = field(default_factory=list)
    extensions: List[str] = field(default_factory=list)
    type_keywords: List[str] = field(default_factory=list)
    ignored_identifiers: List[str] = field(default_factory=list)
    structural_markers: List[str] = field(default_factory=list)
    structural_lines: List[str] = field(default_factory=list)

    def matches(self, language: str) -> bool:
        """Check if this profile answers to a language name or alias"""
        language = language.lower()
        return language == self.name.lower() or language in [a.lower() for a in self.aliases]

    def is_structural(self, line: str) -> bool:
        """Check if a trimmed source line is scaffolding rather than a statement"""
        if line in self.structural_lines:
            return True
        return any(marker in line for marker in self.structural_markers)


class LanguageLoader:
    """Loads and parses language profiles from YAML files"""

    def __init__(self, languages_dir: Optional[Path] = None):
        self.languages_dir = languages_dir or DEFAULT_LANGUAGES_DIR
        self.profiles: List[LanguageProfile] = []
        self._loaded_files: List[str] = []

    def load_all_profiles(self) -> List[LanguageProfile]:
        """Load all profiles from the languages directory"""
        self.profiles = []
        self._loaded_files = []

        if not self.languages_dir.exists():
            logger.warning(f"Languages directory not found: {self.languages_dir}")
            return self.profiles

        yaml_files = sorted(self.languages_dir.glob("*.yaml")) + sorted(self.languages_dir.glob("*.yml"))

        for yaml_file in yaml_files:
            try:
                profile = self.load_profile_from_file(yaml_file)
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Failed to load language profile from {yaml_file}: {e}")
                continue

            if profile is None:
                logger.warning(f"Skipping language profile without a name: {yaml_file.name}")
                continue

            self.profiles.append(profile)
            self._loaded_files.append(str(yaml_file))
            logger.debug(f"Loaded language profile '{profile.name}' from {yaml_file.name}")

        logger.info(f"Total language profiles loaded: {len(self.profiles)}")
        return self.profiles

    def load_profile_from_file(self, filepath: Path) -> Optional[LanguageProfile]:
        """Load a single profile from a YAML file"""
        with open(filepath, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            return None

        return self._parse_profile(data)

    def _parse_profile(self, raw: Dict[str, Any]) -> Optional[LanguageProfile]:
        """Parse a single profile from raw YAML data"""
        if not raw.get('name'):
            return None

        return LanguageProfile(
            name=str(raw['name']),
            aliases=self._string_list(raw.get('aliases')),
            extensions=self._string_list(raw.get('extensions')),
            type_keywords=self._string_list(raw.get('type_keywords')),
            ignored_identifiers=self._string_list(raw.get('ignored_identifiers')),
            structural_markers=self._string_list(raw.get('structural_markers')),
            structural_lines=self._string_list(raw.get('structural_lines')),
        )

    @staticmethod
    def _string_list(value: Any) -> List[str]:
        if not value:
            return []
        if isinstance(value, str):
            return [value]
        return [str(v) for v in value]

    def get_profile(self, language: str) -> LanguageProfile:
        """Get the profile for a language name or alias"""
        if not self.profiles:
            self.load_all_profiles()

        for profile in self.profiles:
            if profile.matches(language):
                return profile

        raise UnsupportedLanguageError(
            f"No language profile for '{language}'. Supported: {self.available_languages}",
            source="languages",
        )

    def get_profile_for_file(self, filepath: Path) -> Optional[LanguageProfile]:
        """Get the profile whose extensions cover a source file"""
        if not self.profiles:
            self.load_all_profiles()

        suffix = filepath.suffix.lower()
        for profile in self.profiles:
            if suffix in [e.lower() for e in profile.extensions]:
                return profile
        return None

    @property
    def available_languages(self) -> List[str]:
        return [p.name for p in self.profiles]
