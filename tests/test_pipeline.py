#
# ErrorCollege - Pipeline Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import warnings

from unittest.mock import Mock

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from errorcollege.pipeline import Continue, ErrorPipeline
from errorcollege.records import ErrorRecord, format_one
from errorcollege.sentinels import DROP, UNCHANGED


# Local Classes & Methods ----------------------------------------------------------------------------------------------

def failing_sink(record):
    raise OSError("storage unavailable")


# Tests ----------------------------------------------------------------------------------------------------------------

class TestErrorPipelineAdd:
    def test_add(self):
        """Store a record rendered from error and meta."""
        records = []
        record = ErrorPipeline(records.append).add({"a": 1}, "Test meta 1")
        assert records == [record]
        assert isinstance(record, ErrorRecord)
        assert (record.error, record.meta) == ("{a:1}", '"Test meta 1"')
        assert record.create_time
        assert record.stack

    def test_default_stack_report(self):
        """A capture line with an apostrophe does not break the report layout."""
        records = []
        pipeline = ErrorPipeline(records.append)
        record = pipeline.add(ValueError("bad"), {"k": "v"})  # don't keep
        assert record.stack.startswith("at test_default_stack_report (")
        assert "File " not in record.stack
        out = format_one(record)
        assert 'k: "v"' in out
        assert 'name: "ValueError"' in out

    def test_explicit_stack(self):
        records = []
        ErrorPipeline(records.append).add("boom", stack="at handler")
        assert records[0].stack == "at handler"

    def test_drop(self):
        """DROP stops the chain and stores nothing."""
        records = []
        later = Mock(return_value=UNCHANGED)
        pipeline = ErrorPipeline(records.append, transforms=[lambda e, m: DROP, later])
        assert pipeline.add({"a": 1}, "Test meta 1") is None
        assert records == []
        later.assert_not_called()

    def test_continue(self):
        """Continue replaces error and meta for the following transforms."""
        records = []
        second = Mock(return_value=UNCHANGED)
        pipeline = ErrorPipeline(records.append)
        pipeline.use(lambda e, m: Continue({"wrapped": e}, {"from": "test"})).use(second)
        record = pipeline.add("x", "old")
        second.assert_called_once_with({"wrapped": "x"}, {"from": "test"})
        assert record.error == '{wrapped:"x"}'
        assert record.meta == '{from:"test"}'

    def test_continue_error_only(self):
        """Continue with an error only clears the meta."""
        records = []
        ErrorPipeline(records.append, [lambda e, m: Continue("replaced")]).add("x", "old")
        assert records[0].error == '"replaced"'
        assert records[0].meta == "None"

    def test_unchanged(self):
        records = []
        ErrorPipeline(records.append, [lambda e, m: UNCHANGED]).add({"a": 1}, "Test meta 1")
        assert len(records) == 1
        assert records[0].error == "{a:1}"

    @pytest.mark.parametrize(
        "result",
        [
            pytest.param(None, id="none"),
            pytest.param(("e", "m"), id="tuple"),
            pytest.param("error", id="str"),
        ],
    )
    def test_invalid_result(self, result):
        records = []
        pipeline = ErrorPipeline(records.append, [lambda e, m: result])
        with pytest.raises(TypeError, match="Continue, UNCHANGED or DROP"):
            pipeline.add("x")
        assert records == []

    def test_on_error(self):
        """on_error receives the pipeline and the transformed pair after storing."""
        records = []
        on_error = Mock(side_effect=lambda p, e, m: assert_stored(records))
        pipeline = ErrorPipeline(records.append, [lambda e, m: Continue(e, "new")], on_error=on_error)
        pipeline.add({"a": 1}, "Test meta 1")
        on_error.assert_called_once_with(pipeline, {"a": 1}, "new")

    def test_on_error_not_called_on_drop(self):
        on_error = Mock()
        ErrorPipeline(lambda r: None, [lambda e, m: DROP], on_error=on_error).add("x")
        on_error.assert_not_called()


class TestErrorPipelineSinkErrors:
    def test_raise(self):
        with pytest.raises(OSError, match="storage unavailable"):
            ErrorPipeline(failing_sink).add("x")

    def test_warn(self):
        with pytest.warns(RuntimeWarning, match="storage unavailable"):
            record = ErrorPipeline(failing_sink, on_sink_error="warn").add("x")
        assert record.error == '"x"'

    def test_skip(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            record = ErrorPipeline(failing_sink, on_sink_error="skip").add("x")
        assert record.error == '"x"'


class TestErrorPipelineConfig:
    def test_use_chain(self):
        pipeline = ErrorPipeline(lambda r: None)
        t1, t2 = Mock(), Mock()
        assert pipeline.use(t1).use(t2) is pipeline
        assert pipeline.transforms == (t1, t2)

    @pytest.mark.parametrize(
        "kwargs, exc",
        [
            pytest.param({"sink": None}, TypeError, id="sink"),
            pytest.param({"sink": list.append, "transforms": [1]}, TypeError, id="transform"),
            pytest.param({"sink": list.append, "on_error": "cb"}, TypeError, id="on_error"),
            pytest.param({"sink": list.append, "on_sink_error": "ignore"}, ValueError, id="on_sink_error"),
        ],
    )
    def test_invalid(self, kwargs, exc):
        with pytest.raises(exc):
            ErrorPipeline(**kwargs)

    def test_use_invalid(self):
        with pytest.raises(TypeError, match="transform must be callable"):
            ErrorPipeline(lambda r: None).use("not a function")

    def test_repr(self):
        assert repr(ErrorPipeline(lambda r: None, [Mock()])) == "<ErrorPipeline transforms=1>"


# Helpers --------------------------------------------------------------------------------------------------------------

def assert_stored(records):
    assert len(records) == 1
