"""Build manifest data types."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ManifestModule:
    """The revision a module repository was at when a build version started."""

    branch: str
    revision: str
    repo: str
    owner: str
    url: str

    def to_dict(self) -> dict:
        return {
            "branch": self.branch,
            "revision": self.revision,
            "repo": self.repo,
            "owner": self.owner,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ManifestModule":
        return cls(
            branch=data["branch"],
            revision=data["revision"],
            repo=data["repo"],
            owner=data["owner"],
            url=data.get("url", ""),
        )


@dataclass
class Manifest:
    """Module revisions pinned for one build version."""

    id: str  # version id
    revision: str
    project_name: str
    branch: str
    modules: dict[str, ManifestModule] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "revision": self.revision,
            "project": self.project_name,
            "branch": self.branch,
            "modules": {name: m.to_dict() for name, m in self.modules.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Manifest":
        return cls(
            id=data["id"],
            revision=data["revision"],
            project_name=data["project"],
            branch=data["branch"],
            modules={
                name: ManifestModule.from_dict(m)
                for name, m in (data.get("modules") or {}).items()
            },
        )


@dataclass
class TaskRef:
    """The task a manifest request is made on behalf of."""

    id: str
    project: str
    version: str
    revision: str


@dataclass
class BranchHead:
    """Head commit of a branch as reported by GitHub."""

    sha: str
    url: str

    @classmethod
    def from_dict(cls, data: dict) -> "BranchHead":
        commit: Optional[dict] = data.get("commit")
        if not commit or not commit.get("sha"):
            raise ValueError("branch response has no commit sha")
        return cls(sha=commit["sha"], url=commit.get("url", ""))
