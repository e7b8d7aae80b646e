"""Tests for YAML parsing and task store loading."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from eventsched.config import AppConfig, SchedulerConfig
from eventsched.exceptions import DataError, MissingReferenceError, ParseError, ValidationError
from eventsched.loader import load_task_store, validate_task_store
from eventsched.models import TimeUnit, TimingRelation
from eventsched.parser import TaskStoreParser


class TestTaskStoreParser:
    """Test the TaskStoreParser."""

    @pytest.fixture
    def parser(self) -> TaskStoreParser:
        """Create a parser instance."""
        return TaskStoreParser()

    def test_parse_simple_file(self, fixtures_dir: Path) -> None:
        """Test loading a valid store with full processing."""
        store = load_task_store(fixtures_dir / "simple_store.yaml", AppConfig())

        assert store.metadata.version == "1.0"
        assert store.metadata.owner == "alice"
        assert [task.id for task in store.tasks] == ["A", "B", "C", "D"]

        task_b = store.get("B")
        assert task_b is not None
        assert task_b.description == "Lighting"
        assert task_b.duration == 1
        assert task_b.dependencies == ["A"]
        assert task_b.timing.relation == TimingRelation.AFTER
        assert task_b.timing.offset == 30
        assert task_b.timing.unit == TimeUnit.MINUTES
        assert task_b.is_global

        event = store.get_event("show")
        assert event is not None
        assert event.title == "Evening show"
        assert event.date == datetime(2024, 1, 1, 9, tzinfo=timezone.utc)
        assert event.task_ids == ["A", "B", "C"]
        assert event.tasks[1].duration == 3
        assert event.tasks[0].duration is None
        assert event.tasks[0].dependencies is None

    def test_private_task_owner_defaults_to_metadata(self, fixtures_dir: Path) -> None:
        """Private tasks without owner belong to the store owner."""
        store = load_task_store(fixtures_dir / "simple_store.yaml", AppConfig())

        task_c = store.get("C")
        task_d = store.get("D")
        assert task_c is not None
        assert task_d is not None
        assert not task_c.is_global
        assert task_c.owner == "alice"
        assert task_d.owner == "bob"

    def test_private_task_without_any_owner(self, parser: TaskStoreParser) -> None:
        """A private task needs an owner from somewhere."""
        data: dict[str, Any] = {"tasks": {"a": {"description": "A", "duration": 1}}}

        with pytest.raises(ValidationError, match="Private task 'a' must have an 'owner'"):
            parser.parse_data(data)

    def test_timing_defaults(self, parser: TaskStoreParser) -> None:
        """Missing timing means zero minutes after."""
        data: dict[str, Any] = {
            "tasks": {
                "a": {"description": "A", "duration": 1, "global": True},
                "b": {"description": "B", "duration": 1, "global": True, "timing": None},
                "c": {
                    "description": "C",
                    "duration": 1,
                    "global": True,
                    "timing": {"relation": "Before", "offset": 5},
                },
            }
        }

        store = parser.parse_data(data)

        for task_id in ("a", "b"):
            task = store.get(task_id)
            assert task is not None
            assert task.timing.relation == TimingRelation.AFTER
            assert task.timing.offset == 0
            assert task.timing.unit == TimeUnit.MINUTES
        task_c = store.get("c")
        assert task_c is not None
        assert task_c.timing.relation == TimingRelation.BEFORE
        assert task_c.timing.unit == TimeUnit.MINUTES

    def test_configured_default_unit(self) -> None:
        """Timings without a unit use the configured default."""
        parser = TaskStoreParser(AppConfig(scheduler=SchedulerConfig(default_unit=TimeUnit.HOURS)))
        data: dict[str, Any] = {
            "tasks": {
                "a": {"description": "A", "duration": 1, "global": True, "timing": {"offset": 2}},
                "b": {
                    "description": "B",
                    "duration": 1,
                    "global": True,
                    "timing": {"offset": 2, "unit": "seconds"},
                },
            }
        }

        store = parser.parse_data(data)

        task_a = store.get("a")
        task_b = store.get("b")
        assert task_a is not None
        assert task_b is not None
        assert task_a.timing.unit == TimeUnit.HOURS
        assert task_b.timing.unit == TimeUnit.SECONDS

    def test_start_date_formats(self, parser: TaskStoreParser) -> None:
        """Start dates accept ISO text, YAML timestamps and epoch ms."""
        expected = datetime(2024, 1, 1, 8, tzinfo=timezone.utc)
        data: dict[str, Any] = {
            "tasks": {
                "iso": {
                    "description": "ISO",
                    "duration": 1,
                    "global": True,
                    "start_date": "2024-01-01T08:00:00Z",
                },
                "native": {
                    "description": "Native",
                    "duration": 1,
                    "global": True,
                    "start_date": datetime(2024, 1, 1, 8),
                },
                "epoch": {
                    "description": "Epoch",
                    "duration": 1,
                    "global": True,
                    "start_date": int(expected.timestamp() * 1000),
                },
            }
        }

        store = parser.parse_data(data)

        for task in store.tasks:
            assert task.start_date == expected

    def test_numeric_ids_become_strings(self, parser: TaskStoreParser) -> None:
        """YAML numeric keys and dependency ids are treated as strings."""
        data: dict[str, Any] = {
            "tasks": {
                1: {"description": "One", "duration": 1, "global": True},
                2: {"description": "Two", "duration": 1, "global": True, "dependencies": [1, 1]},
            }
        }

        store = parser.parse_data(data)

        task_two = store.get("2")
        assert task_two is not None
        assert task_two.dependencies == ["1"]

    def test_single_dependency_string(self, parser: TaskStoreParser) -> None:
        """A single dependency may be given without a list."""
        data: dict[str, Any] = {
            "tasks": {
                "a": {"description": "A", "duration": 1, "global": True},
                "b": {"description": "B", "duration": 1, "global": True, "dependencies": "a"},
            }
        }

        task_b = parser.parse_data(data).get("b")
        assert task_b is not None
        assert task_b.dependencies == ["a"]

    @pytest.mark.parametrize(
        "task_data",
        [
            {"description": "A", "duration": 0, "global": True},
            {"description": "A", "duration": -1, "global": True},
            {"description": "   ", "duration": 1, "global": True},
            {"description": "A", "duration": 1, "global": True, "timing": {"offset": -5}},
            {"description": "A", "duration": 1, "global": True, "timing": {"relation": "during"}},
            {"description": "A", "duration": 1, "global": True, "timing": {"unit": "days"}},
            {"description": "A", "duration": 1, "global": True, "start_date": "not a date"},
            {"description": "A", "duration": float("inf"), "global": True},
            {"description": "A", "duration": float("nan"), "global": True},
            {"description": "A", "duration": 1, "timing": {"offset": float("inf")}, "global": True},
            {"description": "A", "duration": 1, "global": True, "start_date": 10**30},
        ],
    )
    def test_invalid_task_records(self, parser: TaskStoreParser, task_data: dict[str, Any]) -> None:
        """Schema violations are reported as validation errors."""
        with pytest.raises(ValidationError, match="Invalid YAML structure"):
            parser.parse_data({"tasks": {"a": task_data}})

    def test_invalid_file(self, fixtures_dir: Path) -> None:
        """Invalid records in a file are validation errors."""
        with pytest.raises(ValidationError):
            load_task_store(fixtures_dir / "invalid_store.yaml", AppConfig())

    def test_missing_file(self, parser: TaskStoreParser, tmp_path: Path) -> None:
        """A store that cannot be read is a data error."""
        with pytest.raises(DataError, match="File not found"):
            parser.parse_file(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, parser: TaskStoreParser, tmp_path: Path) -> None:
        """YAML syntax errors are parse errors."""
        path = tmp_path / "bad.yaml"
        path.write_text("tasks: [unclosed\n")

        with pytest.raises(ParseError, match="Failed to parse YAML"):
            parser.parse_file(path)

    def test_non_mapping_root(self, parser: TaskStoreParser, tmp_path: Path) -> None:
        """The document root must be a mapping."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ParseError, match="dictionary at the root"):
            parser.parse_file(path)

    def test_empty_file(self, parser: TaskStoreParser, tmp_path: Path) -> None:
        """An empty document is an empty store."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        store = parser.parse_file(path)

        assert store.tasks == []
        assert store.events == []

    def test_event_tasks_as_ids_and_mappings(self, parser: TaskStoreParser) -> None:
        """Event assignments accept bare ids and override mappings."""
        data: dict[str, Any] = {
            "tasks": {"a": {"description": "A", "duration": 1, "global": True}},
            "events": {
                "e": {
                    "title": "E",
                    "date": "2024-01-01",
                    "tasks": ["a", {"task": "a", "dependencies": "x"}],
                }
            },
        }

        event = parser.parse_data(data).get_event("e")

        assert event is not None
        assert event.date == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert event.tasks[0].dependencies is None
        assert event.tasks[1].dependencies == ["x"]

    def test_infinite_event_duration_override(self, parser: TaskStoreParser) -> None:
        """Event duration overrides must be finite."""
        data: dict[str, Any] = {
            "tasks": {"a": {"description": "A", "duration": 1, "global": True}},
            "events": {
                "e": {
                    "title": "E",
                    "date": "2024-01-01",
                    "tasks": [{"task": "a", "duration": float("inf")}],
                }
            },
        }

        with pytest.raises(ValidationError, match="Invalid YAML structure"):
            parser.parse_data(data)

    def test_yaml_infinity_is_rejected(self, parser: TaskStoreParser, tmp_path: Path) -> None:
        """YAML's .inf is not accepted as a duration."""
        path = tmp_path / "inf.yaml"
        path.write_text("tasks:\n  a:\n    description: A\n    duration: .inf\n    global: true\n")

        with pytest.raises(ValidationError, match="Invalid YAML structure"):
            parser.parse_file(path)


class TestValidateTaskStore:
    """Test store-level validation."""

    def test_unknown_event_task(self) -> None:
        """Events may only assign existing tasks."""
        store = TaskStoreParser().parse_data(
            {
                "tasks": {"a": {"description": "A", "duration": 1, "global": True}},
                "events": {"e": {"title": "E", "date": "2024-01-01", "tasks": ["a", "ghost"]}},
            }
        )

        with pytest.raises(MissingReferenceError, match="Event e assigns unknown task: ghost"):
            validate_task_store(store)

    def test_duplicate_event_titles(self) -> None:
        """Event titles are unique."""
        store = TaskStoreParser().parse_data(
            {
                "events": {
                    "one": {"title": "Launch", "date": "2024-01-01"},
                    "two": {"title": "Launch", "date": "2024-02-01"},
                }
            }
        )

        with pytest.raises(ValidationError, match="Event title 'Launch'"):
            validate_task_store(store)

    def test_example_store_loads(self) -> None:
        """The bundled example store is valid."""
        example = Path(__file__).parent.parent / "examples" / "event_tasks.yaml"

        store = load_task_store(example)

        assert store.get_event("launch") is not None
        pinned = store.get("speaker_briefing")
        assert pinned is not None
        assert pinned.start_date == datetime(2024, 6, 1, 8, tzinfo=timezone.utc)
