from dataclasses import dataclass
from typing import Dict, List

from .config import CHARSET_ALIASES, CHARSETS
from .parser import OrgDocument, OrgHeadline


@dataclass
class ValidationIssue:
    path: str
    message: str
    severity: str = "error"  # 'error' | 'warn'


@dataclass
class ValidationResult:
    issues: List[ValidationIssue]

    def ok(self) -> bool:
        return all(i.severity != 'error' for i in self.issues)


def _check_tables(blocks, path: str, issues: List[ValidationIssue]) -> None:
    for bidx, block in enumerate(blocks):
        if isinstance(block, OrgHeadline):
            _check_tables(block.blocks, f"{path}/blocks/{bidx}", issues)
            continue
        kind = block.get('kind')
        if kind == 'table':
            widths = {len(r) for r in block.get('rows') or []}
            if len(widths) > 1:
                issues.append(
                    ValidationIssue(
                        path=f"{path}/blocks/{bidx}",
                        message="Table rows have different cell counts",
                        severity='warn',
                    )
                )
        elif kind == 'list':
            for iidx, item in enumerate(block.get('items') or []):
                _check_tables(item.get('blocks') or [], f"{path}/blocks/{bidx}/items/{iidx}", issues)
        elif kind == 'special':
            _check_tables(block.get('blocks') or [], f"{path}/blocks/{bidx}", issues)


def validate_document(doc: OrgDocument) -> ValidationResult:
    """Check a parsed document for problems that degrade the export.

    Errors make the export unusable; warnings flag output that will look
    different from what the author probably meant.
    """
    issues: List[ValidationIssue] = []
    if not isinstance(doc, OrgDocument):
        return ValidationResult([ValidationIssue(path="/", message="Not an Org document")])

    charset = doc.meta.get('ASCII_CHARSET')
    if charset is not None:
        normalized = CHARSET_ALIASES.get(charset.strip().lower(), charset.strip().lower())
        if normalized not in CHARSETS:
            issues.append(
                ValidationIssue(
                    path="/meta/ASCII_CHARSET",
                    message=f"Unknown charset '{charset}' (expected one of {', '.join(CHARSETS)})",
                )
            )

    if not doc.children:
        issues.append(ValidationIssue(path="/children", message="Document has no headlines", severity='warn'))

    seen_ids: Dict[str, str] = {}
    _check_tables(doc.blocks, "", issues)

    def walk(nodes, path: str, parent_level: int):
        for idx, el in enumerate(nodes):
            epath = f"{path}/children/{idx}"
            if not el.title.strip():
                issues.append(ValidationIssue(path=f"{epath}/title", message="Empty headline title", severity='warn'))
            if parent_level and el.level > parent_level + 1:
                issues.append(
                    ValidationIssue(
                        path=f"{epath}/level",
                        message=f"Headline skips levels ({parent_level} -> {el.level})",
                        severity='warn',
                    )
                )
            cid = el.properties.get('CUSTOM_ID')
            if cid:
                if cid in seen_ids:
                    issues.append(
                        ValidationIssue(
                            path=f"{epath}/properties/CUSTOM_ID",
                            message=f"Duplicate CUSTOM_ID '{cid}' (first used at {seen_ids[cid]})",
                        )
                    )
                else:
                    seen_ids[cid] = epath
            _check_tables(el.blocks, epath, issues)
            walk(el.children, epath, el.level)

    walk(doc.children, "", 0)
    return ValidationResult(issues)
