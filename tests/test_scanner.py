"""
Project scanner tests.
"""

import pytest

from vecmem.core.engine import MemoryEngine
from vecmem.core.errors import NotInitializedError
from vecmem.core.scanner import ProjectScanner
from vecmem.vector.embeddings import TfidfEmbedding


@pytest.fixture
def project(tmp_path):
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "node_modules" / "lib").mkdir(parents=True)
    (root / ".git").mkdir()

    (root / "src" / "app.py").write_text("def main():\n    return 'hello'\n")
    (root / "README.md").write_text("# Project\nSmall readme.\n")
    (root / "src" / "logo.png").write_bytes(b"\x89PNG\r\n")
    (root / "node_modules" / "lib" / "index.js").write_text("module.exports = {};\n")
    (root / ".git" / "hooks.js").write_text("// hidden\n")
    (root / "src" / "big.py").write_text("x = 1\n" * 50)
    (root / "src" / "binary.py").write_bytes(b"\xff\xfe\x00invalid")
    return root


@pytest.fixture
def engine(tmp_path):
    engine = MemoryEngine(base_path=tmp_path / "store", embedding_provider=TfidfEmbedding())
    engine.initialize()
    return engine


def test_scan_indexes_matching_files(project, engine):
    scanner = ProjectScanner(engine, extensions=["py", ".md", "js"], max_file_bytes=100)

    report = scanner.scan(project, group_id="demo")

    assert report.indexed == 2
    assert report.skipped == 2
    assert report.failed == 0
    assert sorted(p.rsplit("/", 1)[-1] for p in report.paths) == ["README.md", "app.py"]

    records = engine.list_group("demo")
    assert {r.metadata["type"] for r in records} == {"py", "md"}
    assert all(r.metadata["path"].startswith(str(project)) for r in records)


def test_rescan_replaces_entries(project, engine):
    scanner = ProjectScanner(engine, extensions=["py", "md"], max_file_bytes=100)

    scanner.scan(project, group_id="demo")
    (project / "src" / "app.py").write_text("def main():\n    return 'changed'\n")
    scanner.scan(project, group_id="demo")

    records = engine.list_group("demo")
    assert len(records) == 2
    app = next(r for r in records if r.metadata["path"].endswith("app.py"))
    assert "changed" in app.content


def test_scanned_files_are_searchable(project, engine):
    # The first embedded document always has zero IDF weights
    engine.add_text("unrelated filler words", "other")
    ProjectScanner(engine, extensions=["py", "md"], max_file_bytes=100).scan(project, group_id="demo")

    results = engine.find_similar("readme project", group_id="demo", limit=1, frozen=True)

    assert results[0].metadata["path"].endswith("README.md")


def test_scan_requires_directory(tmp_path, engine):
    with pytest.raises(NotADirectoryError):
        ProjectScanner(engine).scan(tmp_path / "missing")


def test_scan_requires_initialized_engine(project, tmp_path):
    engine = MemoryEngine(base_path=tmp_path / "store", embedding_provider=TfidfEmbedding())

    with pytest.raises(NotInitializedError):
        ProjectScanner(engine).scan(project)


def test_extensions_default_from_environment(monkeypatch, engine):
    monkeypatch.setenv("VECMEM_SCAN_EXTENSIONS", "rs, .Go")
    scanner = ProjectScanner(engine)
    assert scanner.extensions == {"rs", "go"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
