"""Manifest load handler.

Looks up the manifest for a task's version. If none exists yet, asks GitHub
for the head revision of every module branch and stores a new manifest. Two
first requests for the same version can race; the store accepts one insert
and the loser re-reads and returns the winner's manifest, so every caller
sees the same module revisions.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from ..projects import ProjectRef
from .github_client import GitHubClientError
from .models import BranchHead, Manifest, ManifestModule, TaskRef

__all__ = [
    "ManifestLoadHandler",
    "ManifestResponse",
    "ManifestError",
    "ManifestClientError",
    "ManifestServerError",
]

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_INTERNAL_SERVER_ERROR = 500


class ManifestError(Exception):
    """Base class for manifest load failures."""

    status_code = HTTP_INTERNAL_SERVER_ERROR


class ManifestClientError(ManifestError):
    """The request cannot be served (missing project or version)."""

    status_code = HTTP_BAD_REQUEST


class ManifestServerError(ManifestError):
    """Upstream API or persistence failure."""

    status_code = HTTP_INTERNAL_SERVER_ERROR


@dataclass
class ManifestResponse:
    """JSON response for a manifest request."""

    status_code: int
    body: dict


class _ProjectLookup(Protocol):
    def find_one(self, identifier: str) -> Optional[ProjectRef]: ...


class _ManifestCollection(Protocol):
    def find_one(self, version_id: str) -> Optional[Manifest]: ...

    def try_insert(self, manifest: Manifest) -> bool: ...


class _BranchLookup(Protocol):
    def get_branch_head(
        self, token: Optional[str], owner: str, repo: str, branch: str
    ) -> BranchHead: ...


class _TokenProvider(Protocol):
    def get_token(self) -> str: ...


class ManifestLoadHandler:
    """Fetch-or-create the manifest of a task's build version."""

    def __init__(
        self,
        projects: _ProjectLookup,
        manifests: _ManifestCollection,
        github: _BranchLookup,
        tokens: _TokenProvider,
    ):
        self.projects = projects
        self.manifests = manifests
        self.github = github
        self.tokens = tokens

    def load(self, task: TaskRef) -> ManifestResponse:
        """Serve a manifest request, turning failures into error responses."""
        try:
            manifest = self.get_or_create(task)
        except ManifestError as e:
            logger.error(
                f"Manifest request failed: task_id={task.id} project={task.project} "
                f"version={task.version} status={e.status_code} error={e}"
            )
            return ManifestResponse(e.status_code, {"error": str(e)})
        return ManifestResponse(HTTP_OK, manifest.to_dict())

    def get_or_create(self, task: TaskRef) -> Manifest:
        """Return the stored manifest for the task's version, creating it if needed.

        Raises:
            ManifestClientError: Unknown project or empty version
            ManifestServerError: GitHub or storage failure
        """
        try:
            project_ref = self.projects.find_one(task.project)
        except Exception as e:
            raise ManifestClientError(f"projectRef not found for project {task.project}: {e}") from e
        if project_ref is None:
            raise ManifestClientError(f"projectRef not found for project {task.project}")

        existing = self._find(task.version)
        if existing is not None:
            return existing

        if not task.version:
            raise ManifestClientError(
                f"found empty version when retrieving manifest for {project_ref.identifier}"
            )

        new_manifest = Manifest(
            id=task.version,
            revision=task.revision,
            project_name=task.project,
            branch=project_ref.branch,
            modules=self._resolve_modules(project_ref),
        )

        try:
            duplicate = self.manifests.try_insert(new_manifest)
        except Exception as e:
            raise ManifestServerError(
                f"problem inserting manifest for project {new_manifest.project_name}: {e}"
            ) from e

        if duplicate:
            stored = self._find(task.version)
            if stored is not None:
                return stored

        return new_manifest

    def _find(self, version_id: str) -> Optional[Manifest]:
        try:
            return self.manifests.find_one(version_id)
        except Exception as e:
            raise ManifestClientError(
                f"error retrieving manifest with version id {version_id}: {e}"
            ) from e

    def _resolve_modules(self, project_ref: ProjectRef) -> dict[str, ManifestModule]:
        modules: dict[str, ManifestModule] = {}
        for module in project_ref.modules:
            owner, repo = module.get_repo_owner_and_name()
            try:
                token = self.tokens.get_token()
            except Exception as e:
                raise ManifestServerError(f"error getting github token: {e}") from e
            try:
                head = self.github.get_branch_head(token, owner, repo, module.branch)
            except GitHubClientError as e:
                raise ManifestServerError(
                    f"problem retrieving git branch for module {module.name}: {e}"
                ) from e
            modules[module.name] = ManifestModule(
                branch=module.branch,
                revision=head.sha,
                repo=repo,
                owner=owner,
                url=head.url,
            )
        return modules
