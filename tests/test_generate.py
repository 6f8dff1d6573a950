"""
Tests for the generation orchestrator — context, destinations, failures.
"""

import io
from pathlib import Path

import pytest

from pds4gen.adapters.pds3 import PDS3Label
from pds4gen.core.errors import GenerationFailure, RenderError
from pds4gen.core.models import GenerationRequest
from pds4gen.core.use_cases.generate import build_context, run_generation
from pds4gen.core.use_cases.resolve import resolve_request


def _request(label_file: Path, template_file: Path, conf: Path, **kwargs) -> GenerationRequest:
    label = PDS3Label(label_file)
    label.set_mappings()
    return GenerationRequest(
        label_source=label,
        template_path=template_file,
        config_directory=conf,
        **kwargs,
    )


class _CountingRenderer:
    def __init__(self, fail: bool = False):
        self.calls = 0
        self.fail = fail

    def render(self, template_path, context):
        self.calls += 1
        if self.fail:
            raise RenderError("boom")
        return "rendered"


class TestBuildContext:
    def test_fields_and_helpers(self, label_file: Path, template_file: Path, tmp_path: Path):
        request = _request(label_file, template_file, tmp_path, auxiliary_file_path="x.img")
        context = build_context(request)
        assert context["PRODUCT_ID"] == "TEST_PRODUCT_001"
        assert context["label"]["IMAGE"]["LINES"] == "512"
        assert context["file_path"] == "x.img"
        assert context["config_dir"] == str(tmp_path)


class TestRunGeneration:
    def test_stdout(self, label_file: Path, template_file: Path, tmp_path: Path):
        stream = io.StringIO()
        result = run_generation(_request(label_file, template_file, tmp_path), stream=stream)
        assert stream.getvalue() == '<product id="TEST_PRODUCT_001" target="MARS" lines="512"/>\n'
        assert result.std_out
        assert result.chars_written == len(stream.getvalue())

    def test_output_file(self, label_file: Path, template_file: Path, tmp_path: Path):
        out = tmp_path / "label.xml"
        stream = io.StringIO()
        result = run_generation(
            _request(label_file, template_file, tmp_path, output_target=str(out)),
            stream=stream,
        )
        assert out.read_text() == '<product id="TEST_PRODUCT_001" target="MARS" lines="512"/>\n'
        assert stream.getvalue() == ""
        assert not result.std_out
        assert result.to_dict()["output_target"] == str(out)

    def test_output_overwritten(self, label_file: Path, template_file: Path, tmp_path: Path):
        out = tmp_path / "label.xml"
        out.write_text("old contents that are longer than the new ones" * 10)
        run_generation(_request(label_file, template_file, tmp_path, output_target=str(out)))
        assert out.read_text().startswith("<product")

    def test_output_dir_not_created(self, label_file: Path, template_file: Path, tmp_path: Path):
        out = tmp_path / "missing" / "label.xml"
        with pytest.raises(GenerationFailure, match="Cannot write output file"):
            run_generation(_request(label_file, template_file, tmp_path, output_target=str(out)))
        assert not out.parent.exists()

    def test_exactly_one_render(self, label_file: Path, template_file: Path, tmp_path: Path):
        renderer = _CountingRenderer()
        run_generation(_request(label_file, template_file, tmp_path), renderer=renderer, stream=io.StringIO())
        assert renderer.calls == 1

    def test_render_failure_not_retried(self, label_file: Path, template_file: Path, tmp_path: Path):
        renderer = _CountingRenderer(fail=True)
        with pytest.raises(GenerationFailure, match="^boom$") as exc:
            run_generation(_request(label_file, template_file, tmp_path), renderer=renderer)
        assert renderer.calls == 1
        assert isinstance(exc.value.__cause__, RenderError)

    def test_unresolved_variable(self, label_file: Path, tmp_path: Path):
        template = tmp_path / "bad.j2"
        template.write_text("{{ NO_SUCH_KEYWORD }}")
        with pytest.raises(GenerationFailure, match="NO_SUCH_KEYWORD"):
            run_generation(_request(label_file, template, tmp_path), stream=io.StringIO())

    def test_std_out_false_without_file(self, label_file: Path, template_file: Path, tmp_path: Path):
        with pytest.raises(GenerationFailure, match="No output file"):
            run_generation(_request(label_file, template_file, tmp_path), std_out=False)

    def test_std_out_forced_with_file(self, label_file: Path, template_file: Path, tmp_path: Path):
        out = tmp_path / "label.xml"
        stream = io.StringIO()
        run_generation(
            _request(label_file, template_file, tmp_path, output_target=str(out)),
            std_out=True,
            stream=stream,
        )
        assert stream.getvalue().startswith("<product")
        assert not out.exists()


class TestEndToEnd:
    def test_mer_label(self, mer_workspace: Path, catalog, conf_dir: Path, monkeypatch):
        monkeypatch.chdir(mer_workspace)
        request = resolve_request(
            {"p": "mer_image.lbl", "t": "image.xml.j2", "o": "out.xml", "c": str(conf_dir)},
            catalog=catalog,
        )
        run_generation(request, std_out=False)
        text = (mer_workspace / "out.xml").read_text()

        assert "<logical_identifier>urn:nasa:pds:mer:1p128287712eff0000p2303l2m1</logical_identifier>" in text
        assert "<start_date_time>2004-01-26T08:20:36.982Z</start_date_time>" in text
        assert "<stop_date_time>2004-01-26T08:20:37.000Z</stop_date_time>" in text
        assert '<exposure_duration unit="ms">204.8</exposure_duration>' in text
        assert "<file_name>1P128287712EFF0000P2303L2M1.IMG</file_name>" in text
        assert '<offset unit="byte">59392</offset>' in text
        assert "<lines>1024</lines>" in text
