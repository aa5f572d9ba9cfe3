"""Record Authority native package exports."""

from packages.stratum_shared.errors import ErrorCategory, ErrorDetail
from services.state.record_authority.assembler import Assembler, MinifiableAssembler
from services.state.record_authority.component import SERVICE_COMPONENT_ID
from services.state.record_authority.config import RecordAuthoritySettings
from services.state.record_authority.implementation import (
    BasicRecordService,
    MinifiableRecordService,
)
from services.state.record_authority.projection import FieldProjection
from services.state.record_authority.record import UtcDateTime, VersionedRecord
from services.state.record_authority.resolution import ResolutionMap
from services.state.record_authority.service import (
    MinifiedRecordService,
    RecordService,
    build_record_service,
)
from services.state.record_authority.transfer import TransferObject

__all__ = [
    "SERVICE_COMPONENT_ID",
    "Assembler",
    "BasicRecordService",
    "ErrorCategory",
    "ErrorDetail",
    "FieldProjection",
    "MinifiableAssembler",
    "MinifiableRecordService",
    "MinifiedRecordService",
    "RecordAuthoritySettings",
    "RecordService",
    "ResolutionMap",
    "TransferObject",
    "UtcDateTime",
    "VersionedRecord",
    "build_record_service",
]
