"""The pass document (``pass.json``) and its deferred validation."""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from passforge.errors import PassFrozenError, ValidationError
from passforge.models import PassFields, Violation

PASS_DOCUMENT_NAME = "pass.json"


def _serialize(document: Mapping[str, Any]) -> bytes:
    return json.dumps(
        document, ensure_ascii=False, allow_nan=False, separators=(",", ":")
    ).encode("utf-8")


class PassData:
    """Mutable pass document that is checked only when assembly starts.

    Key order of the supplied mapping is preserved in the serialized document.
    Once :meth:`freeze` is called the serialized bytes are fixed and further
    changes raise :class:`~passforge.errors.PassFrozenError`.
    """

    def __init__(self, data: Mapping[str, Any] | str | None = None) -> None:
        self._document: dict[str, Any] = {}
        self._frozen_bytes: bytes | None = None
        if data is not None:
            self.set_data(data)

    @property
    def frozen(self) -> bool:
        return self._frozen_bytes is not None

    def set_data(self, data: Mapping[str, Any] | str, merge: bool = False) -> None:
        """Replace the document, or merge *data* into it when *merge* is true.

        *data* may be a mapping or a JSON string holding an object.
        """
        if self.frozen:
            raise PassFrozenError("Pass data cannot be changed after the pass was built.")
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as exc:
                raise ValidationError(
                    [Violation(field="<document>", message=f"not valid JSON: {exc}")]
                ) from exc
        if not isinstance(data, Mapping):
            raise ValidationError(
                [Violation(field="<document>", message="pass data must be a JSON object")]
            )
        incoming = copy.deepcopy(dict(data))
        if merge:
            self._document.update(incoming)
        else:
            self._document = incoming

    def validate(self) -> list[Violation]:
        """Return every problem with the current document; empty when valid."""
        violations: list[Violation] = []
        try:
            PassFields.model_validate(self._document)
        except PydanticValidationError as exc:
            for error in exc.errors():
                field = ".".join(str(part) for part in error["loc"]) or "<document>"
                violations.append(Violation(field=field, message=error["msg"]))
        try:
            _serialize(self._document)
        except (TypeError, ValueError) as exc:
            violations.append(Violation(field="<document>", message=str(exc)))
        return violations

    def require_valid(self) -> None:
        violations = self.validate()
        if violations:
            raise ValidationError(violations)

    def freeze(self) -> None:
        if self._frozen_bytes is None:
            self._frozen_bytes = _serialize(self._document)

    def to_bytes(self) -> bytes:
        """Serialized document; the frozen bytes once :meth:`freeze` ran."""
        if self._frozen_bytes is not None:
            return self._frozen_bytes
        return _serialize(self._document)

    def as_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._document)

    def get(self, key: str, default: Any = None) -> Any:
        return self._document.get(key, default)


__all__ = ["PASS_DOCUMENT_NAME", "PassData"]
