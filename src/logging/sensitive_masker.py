"""
LOT 2: Logging - Sensitive Masker

Retire jetons et mots de passe des champs extra avant écriture d'un log.
"""

from typing import Any, Dict, List, Optional

from .interfaces import ISensitiveMasker


class SensitiveMasker(ISensitiveMasker):
    """
    Masquage récursif (dict, list, tuple).

    Clé sensible: contient un pattern, ou vaut exactement "access" /
    "refresh" ("accessible" et "refresh_count" restent lisibles). Toute
    valeur "Bearer <jeton>" est masquée quelle que soit sa clé.

    Example:
        SensitiveMasker().mask({"refresh": "eyJ...", "username": "admin"})
        # {"refresh": "***MASKED***", "username": "admin"}
    """

    BEARER_PREFIX: str = "bearer "

    def __init__(self, additional_patterns: Optional[List[str]] = None) -> None:
        self._patterns: List[str] = []
        for pattern in self.SENSITIVE_PATTERNS + list(additional_patterns or []):
            if pattern:
                self._register(pattern)

    @property
    def patterns(self) -> List[str]:
        return list(self._patterns)

    def _register(self, pattern: str) -> None:
        normalized = pattern.strip().lower()
        if normalized not in self._patterns:
            self._patterns.append(normalized)

    def _is_bearer(self, value: Any) -> bool:
        return isinstance(value, str) and value.lower().startswith(self.BEARER_PREFIX)

    def mask(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(data, dict):
            return data
        return {
            key: self.MASK_VALUE if self.is_sensitive_key(str(key)) else self._walk(value)
            for key, value in data.items()
        }

    def _walk(self, value: Any) -> Any:
        if isinstance(value, dict):
            return self.mask(value)
        if isinstance(value, (list, tuple)):
            return [self._walk(item) for item in value]
        if self._is_bearer(value):
            return self.mask_string(value)
        return value

    def mask_string(self, value: str) -> str:
        """Le schéma Bearer reste visible, pas le jeton."""
        if self._is_bearer(value):
            return f"Bearer {self.MASK_VALUE}"
        return self.MASK_VALUE

    def is_sensitive_key(self, key: str) -> bool:
        lowered = (key or "").lower()
        if not lowered:
            return False
        return lowered in self.EXACT_SENSITIVE_KEYS or any(
            pattern in lowered for pattern in self._patterns
        )

    def add_pattern(self, pattern: str) -> None:
        """
        Raises:
            ValueError: pattern vide
        """
        if not pattern or not pattern.strip():
            raise ValueError("Pattern cannot be empty")
        self._register(pattern)

    def remove_pattern(self, pattern: str) -> bool:
        normalized = pattern.strip().lower()
        if normalized not in self._patterns:
            return False
        self._patterns.remove(normalized)
        return True
