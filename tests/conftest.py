"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from git import Actor, Repo

from src.ai_attribution.data_models import AiTool, CommitAttribution

ALICE = Actor("Alice Smith", "alice@example.com")
BOB = Actor("Bob Jones", "bob@example.com")


@pytest.fixture
def make_commit():
    """Factory for CommitAttribution records with sensible defaults."""
    counter = {"n": 0}

    def _make(
        assisted: bool = False,
        tool: AiTool | None = None,
        files: list[str] | None = None,
        commit_hash: str | None = None,
        confidence: str | None = None,
    ) -> CommitAttribution:
        counter["n"] += 1
        return CommitAttribution(
            commit_hash=commit_hash or f"{counter['n']:040x}",
            author="Alice Smith",
            author_email="alice@example.com",
            commit_time=datetime(2024, 3, counter["n"], 12, 0, tzinfo=timezone.utc),
            message=f"Commit number {counter['n']}",
            ai_assisted=assisted,
            ai_tool=tool,
            ai_confidence=confidence,
            files_changed=files or [],
        )

    return _make


def _write(repo_dir, files):
    for path, content in files.items():
        target = repo_dir / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")


@pytest.fixture
def git_repo(tmp_path):
    """A small repository with four commits and a ``v1`` tag on the second.

    History, oldest first:

    1. root commit adding ``README.md`` and ``App.java`` (no trailers)
    2. Copilot-assisted commit adding ``PaymentService.java`` and editing
       ``README.md`` (tagged ``v1``)
    3. human commit adding ``docs/guide.md``
    4. Claude-assisted commit deleting ``App.java``
    """
    repo_dir = tmp_path / "payments"
    repo = Repo.init(repo_dir)

    def commit(message, files=None, delete=None, author=ALICE):
        if files:
            _write(repo_dir, files)
            repo.index.add(list(files))
        if delete:
            repo.index.remove(delete, working_tree=True)
        return repo.index.commit(message, author=author, committer=author)

    root = commit(
        "Initial commit",
        files={
            "README.md": "# Payments\n",
            "src/main/java/com/bank/App.java": "class App {}\n",
        },
    )
    payments = commit(
        "Add payment service\n\n"
        "Implements the first version of the service.\n\n"
        "AI-Tool: GitHub Copilot\n"
        "AI-Confidence: high\n",
        files={
            "README.md": "# Payments\n\nNow with a service.\n",
            "src/main/java/com/bank/payments/PaymentService.java": "class PaymentService {}\n",
        },
    )
    repo.create_tag("v1", ref=payments)
    docs = commit(
        "Write user guide",
        files={"docs/guide.md": "# Guide\n"},
        author=BOB,
    )
    removal = commit(
        "Remove legacy app\n\nAI-Assisted: yes\nAI-Tool: claude-3\n",
        delete=["src/main/java/com/bank/App.java"],
    )

    yield SimpleNamespace(
        path=repo_dir,
        repo=repo,
        commit=commit,
        root=root,
        payments=payments,
        docs=docs,
        removal=removal,
    )

    repo.close()
