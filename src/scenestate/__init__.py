"""
Scan-Snapshot-Apply-Revert engine for batch scene mutations.

This package provides the state management behind batch-editing tools that
mutate a host engine's scene and assets: find what would change, remember how
things were, change them, and put them back.

Key Features:
- Scope-filtered, deterministic, side-effect free scanning
- Single revert baseline that never drifts across repeated applies
- Durable first-write-wins backups that survive process restarts
- Batched apply with stale-value re-validation and partial-failure reports
- Host capability interface with session-only and persistent identities

Quick Start:
    >>> from scenestate import SSAREngine, Scope, InMemoryHost
    >>> host = InMemoryHost()
    >>> host.add("Cube", "Renderer", enabled=True)
    'Cube'
    >>> engine = SSAREngine(host)
    >>> candidates = engine.scan(Scope("Renderer"), "enabled", False)
    >>> report = engine.apply(candidates, capture=[c.object_key for c in candidates])
    >>> report.changed
    1
    >>> engine.revert().restored_count
    1

Architecture:
    Scanner  -> Candidate list (preview)
    SnapshotStore / BackupStore -> pre-mutation state keyed by stable identity
    Applier  -> batched writes, one refresh per changed object
    RevertCoordinator -> NO_BASELINE / BASELINE_CAPTURED lifecycle

Modules:
    - host: SceneHost capability interface
    - memory_host: dictionary-backed host
    - snapshot_model: snapshot and backup dataclasses
    - reports: candidates and operation reports
    - scanner, applier, snapshot_store, backup_store, revert: SSAR components
    - engine: SSAREngine facade
    - interaction: confirmation / progress primitives
    - config: policy constants and thread-local current config
"""

from scenestate.errors import (
    SceneStateError,
    ScopeUnavailableError,
    NoBaselineError,
    HostWriteError,
    VolatileIdentityError,
)
from scenestate.snapshot_model import (
    Key,
    IdentityKind,
    AttributeSnapshot,
    SnapshotSet,
    BackupEntry,
)
from scenestate.reports import Candidate, ApplyReport, RestoreReport, SkipReason
from scenestate.host import SceneHost
from scenestate.memory_host import InMemoryHost
from scenestate.interaction import Interaction, HeadlessInteraction, progress_reporter
from scenestate.config import (
    SceneStateConfig,
    set_current_config,
    get_current_config,
    reset_current_config,
    config_override,
)
from scenestate.scanner import Scanner, Scope, differs, exceeds, at_least
from scenestate.applier import Applier
from scenestate.snapshot_store import SnapshotStore
from scenestate.backup_store import BackupStore
from scenestate.revert import RevertCoordinator, RevertState, Observation
from scenestate.engine import SSAREngine

__all__ = [
    # Errors
    'SceneStateError',
    'ScopeUnavailableError',
    'NoBaselineError',
    'HostWriteError',
    'VolatileIdentityError',
    # Data model
    'Key',
    'IdentityKind',
    'AttributeSnapshot',
    'SnapshotSet',
    'BackupEntry',
    'Candidate',
    'ApplyReport',
    'RestoreReport',
    'SkipReason',
    # Host
    'SceneHost',
    'InMemoryHost',
    # Interaction
    'Interaction',
    'HeadlessInteraction',
    'progress_reporter',
    # Configuration
    'SceneStateConfig',
    'set_current_config',
    'get_current_config',
    'reset_current_config',
    'config_override',
    # Components
    'Scanner',
    'Scope',
    'differs',
    'exceeds',
    'at_least',
    'Applier',
    'SnapshotStore',
    'BackupStore',
    'RevertCoordinator',
    'RevertState',
    'Observation',
    'SSAREngine',
]

__version__ = '1.0.0'
__description__ = 'Scan-Snapshot-Apply-Revert engine for batch scene mutations'
