import io
import json
import logging

import pytest
from lxml import etree

from thicknessadjuster.logging_config import setup_logging
from thicknessadjuster.main import default_output_path, main

from conftest import TAB_PANEL_D

SVG = f'<svg xmlns="http://www.w3.org/2000/svg"><path d="{TAB_PANEL_D}"/></svg>'


@pytest.fixture
def panel_svg(tmp_path):
    path = tmp_path / "panel.svg"
    path.write_text(SVG, encoding="utf-8")
    return path


def test_default_output_path(tmp_path):
    assert default_output_path(tmp_path / "box.svg") == tmp_path / "box_adjusted.svg"


def test_adjust_and_save(panel_svg, capsys):
    code = main([str(panel_svg), "--adjust", "path_0_seg_1", "path_0_seg_3", "--log-level", "WARNING"])

    assert code == 0
    out = panel_svg.with_name("panel_adjusted.svg")
    assert out.exists()
    d = etree.parse(str(out)).getroot()[0].get("d")
    assert "L 10 -11.3386" in d
    assert "Adjusted 2 segments" in capsys.readouterr().out


def test_double_thickness_and_explicit_output(panel_svg, tmp_path):
    out = tmp_path / "result.svg"
    code = main([
        str(panel_svg), "-o", str(out), "--thickness", "2", "--dpi", "25.4",
        "--adjust-double", "path_0_seg_1", "path_0_seg_3", "--log-level", "ERROR",
    ])
    assert code == 0
    # 2 x 2 mm at 25.4 DPI is 4 units
    assert "L 10 -4 " in etree.parse(str(out)).getroot()[0].get("d")


def test_config_file(panel_svg, tmp_path):
    config = tmp_path / "params.json"
    config.write_text(json.dumps({"material_thickness_mm": 2.54, "dpi": 100}), encoding="utf-8")
    code = main([str(panel_svg), "--config", str(config), "--adjust", "path_0_seg_1", "path_0_seg_3", "--log-level", "ERROR"])
    assert code == 0
    assert "L 10 -10 " in etree.parse(str(panel_svg.with_name("panel_adjusted.svg"))).getroot()[0].get("d")


def test_list_segments(panel_svg, capsys):
    code = main([str(panel_svg), "--list", "--log-level", "ERROR"])
    assert code == 0
    out = capsys.readouterr().out
    assert "shape_0" in out
    assert "path_0_seg_7" in out
    assert "perimeter 110.000" in out
    assert not panel_svg.with_name("panel_adjusted.svg").exists()


def test_unknown_segment_id(panel_svg):
    assert main([str(panel_svg), "--adjust", "nope", "--log-level", "ERROR"]) == 2


def test_invalid_parameters(panel_svg):
    assert main([str(panel_svg), "--dpi", "0", "--log-level", "ERROR"]) == 2
    assert main([str(panel_svg), "--thickness", "-3", "--log-level", "ERROR"]) == 2


def test_missing_input(tmp_path):
    assert main([str(tmp_path / "missing.svg"), "--log-level", "ERROR"]) == 2


def test_missing_argument():
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2


def test_log_file(panel_svg, tmp_path):
    log_file = tmp_path / "run.log"
    main([str(panel_svg), "--log-level", "DEBUG", "--log-file", str(log_file)])
    assert "Logging initialized." in log_file.read_text(encoding="utf-8")


def test_setup_logging_accepts_level_names():
    stream = io.StringIO()
    logger = setup_logging("debug", stream=stream)
    assert logger.level == logging.DEBUG
    assert "Logging initialized." in stream.getvalue()
    with pytest.raises(ValueError):
        setup_logging("loud")
