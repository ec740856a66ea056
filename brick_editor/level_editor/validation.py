"""
Validation and cleanup for brick levels.

Provides:
- clean_bricks(): filter that drops structurally invalid "ghost" bricks
- validate_level(): non-destructive report of the same problems plus
  softer findings (unpaired portals, overlapping occupancy)

Ghost bricks are bricks left behind by inconsistent edits:
- outside the grid, or with non-finite pixel coordinates
- non-portal bricks carrying a portal id
- portal bricks without an id
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .data_model import Brick, CellSize, HalfSlot, LevelDocument, is_portal_id, legacy_cell
from .portal_pairing import unpaired_portal_ids

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationIssue:
    """A single validation issue."""
    severity: ValidationSeverity
    code: str
    message: str
    col: Optional[int] = None
    row: Optional[int] = None
    portal_id: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == ValidationSeverity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity == ValidationSeverity.WARNING


@dataclass
class ValidationResult:
    """Result of level validation."""
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Check if the level has no ghost bricks (no errors)."""
        return not any(i.is_error for i in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(i.is_warning for i in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.is_warning)


def _grid_cell(brick: Brick, cell_size: Optional[CellSize]) -> Optional[Tuple[int, int]]:
    if brick.has_grid_position:
        return brick.col, brick.row
    if cell_size is None:
        return None
    if not (math.isfinite(brick.x) and math.isfinite(brick.y)):
        return None
    return legacy_cell(brick.x, brick.y, cell_size)


def ghost_reason(brick: Brick, width: int, height: int,
                 cell_size: Optional[CellSize] = None) -> Optional[Tuple[str, str]]:
    """Why a brick is structurally invalid.

    Args:
        brick: Brick to check
        width: Grid columns
        height: Grid rows
        cell_size: Cell geometry; lets bricks without col/row be placed by pixel position

    Returns:
        (code, message) for an invalid brick, None for a valid one
    """
    if not (math.isfinite(brick.x) and math.isfinite(brick.y)):
        return "NON_FINITE", f"Brick has non-finite position ({brick.x}, {brick.y})"

    cell = _grid_cell(brick, cell_size)
    if cell is None:
        return "NO_POSITION", "Brick has no grid position"
    col, row = cell
    if not (0 <= col < width and 0 <= row < height):
        return "OUT_OF_BOUNDS", f"Brick at ({col}, {row}) is outside the {width}x{height} grid"

    if not brick.is_portal and is_portal_id(brick.id):
        return "GHOST_PORTAL_ID", f"{brick.type.value} brick carries portal id {brick.id}"

    if brick.is_portal and not brick.id:
        return "PORTAL_MISSING_ID", f"Portal at ({col}, {row}) has no pair id"

    return None


def clean_bricks(bricks: List[Brick], width: int, height: int,
                 cell_size: Optional[CellSize] = None) -> List[Brick]:
    """Drop ghost bricks. A filter, not a repair; running it twice changes nothing more.

    Args:
        bricks: Bricks to filter (not modified)
        width: Grid columns
        height: Grid rows
        cell_size: Cell geometry for bricks that predate col/row; without it
            such bricks are dropped

    Returns:
        New list with only the valid bricks, in input order
    """
    cleaned = []
    for brick in bricks:
        reason = ghost_reason(brick, width, height, cell_size)
        if reason is None:
            cleaned.append(brick)
        else:
            logger.warning("Removing invalid brick (%s): %s", reason[0], reason[1])
    return cleaned


def clean_document(document: LevelDocument) -> LevelDocument:
    """Return the document with ghost bricks removed (the same object if already clean)."""
    cleaned = clean_bricks(document.bricks, document.width, document.height,
                           document.cell_size())
    if len(cleaned) == len(document.bricks):
        return document
    return document.with_bricks(cleaned)


class LevelValidator:
    """Validator for brick levels."""

    def validate(self, document: LevelDocument) -> ValidationResult:
        """Run all validation checks on the level."""
        if not document.bricks:
            return ValidationResult(issues=[ValidationIssue(
                severity=ValidationSeverity.INFO,
                code="EMPTY",
                message="Level is empty",
            )])

        issues: List[ValidationIssue] = []
        issues.extend(self._check_ghosts(document))
        issues.extend(self._check_overlaps(document))
        issues.extend(self._check_portal_pairs(document))

        result = ValidationResult(issues=issues)
        if issues:
            logger.debug("Validation complete: %d errors, %d warnings",
                         result.error_count, result.warning_count)
        return result

    def _check_ghosts(self, document: LevelDocument) -> List[ValidationIssue]:
        issues = []
        cell_size = document.cell_size()
        for brick in document.bricks:
            reason = ghost_reason(brick, document.width, document.height, cell_size)
            if reason is not None:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code=reason[0],
                    message=reason[1],
                    col=brick.col,
                    row=brick.row,
                    portal_id=brick.id,
                ))
        return issues

    def _check_overlaps(self, document: LevelDocument) -> List[ValidationIssue]:
        """Check for bricks sharing a cell or slot, or halves under a full-size brick."""
        issues = []
        owners: Dict[Tuple[int, int], List[Optional[HalfSlot]]] = {}
        for brick in document.bricks:
            if not brick.has_grid_position:
                continue
            owners.setdefault((brick.col, brick.row), []).append(brick.slot)

        for (col, row), slots in owners.items():
            full = slots.count(None)
            halves = [s for s in slots if s is not None]
            if full > 1 or (full and halves) or len(halves) != len(set(halves)):
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="OVERLAP",
                    message=f"Cell overlap at ({col}, {row})",
                    col=col,
                    row=row,
                ))
        return issues

    def _check_portal_pairs(self, document: LevelDocument) -> List[ValidationIssue]:
        return [
            ValidationIssue(
                severity=ValidationSeverity.WARNING,
                code="UNPAIRED_PORTAL",
                message=f"Portal {pid} has no partner",
                portal_id=pid,
            )
            for pid in unpaired_portal_ids(document.bricks)
        ]


def validate_level(document: LevelDocument) -> ValidationResult:
    """Convenience wrapper around LevelValidator."""
    return LevelValidator().validate(document)
