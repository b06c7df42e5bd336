from .parser import (
    parse_org as parse_org,
    parse_org_string as parse_org_string,
    OrgDocument as OrgDocument,
    OrgHeadline as OrgHeadline,
)
from .config import (
    ExportConfig as ExportConfig,
    DEFAULTS as DEFAULTS,
    config_from_meta as config_from_meta,
)
from .title import build_title as build_title
from .export import (
    ExportDriver as ExportDriver,
    build_info as build_info,
    export_document as export_document,
    export_string as export_string,
    export_file as export_file,
)
from .semicolon import (
    BACKEND as SEMICOLON_BACKEND,
    EXPORT_TARGETS as EXPORT_TARGETS,
    derive_backend as derive_backend,
    transcode_headline as transcode_headline,
    export_to_target as export_to_target,
    export_string_to_target as export_string_to_target,
    export_file_to_target as export_file_to_target,
)
from .postprocess import postprocess as postprocess
from .validation import (
    validate_document as validate_document,
    ValidationIssue as ValidationIssue,
    ValidationResult as ValidationResult,
)
