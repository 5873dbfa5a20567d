import json

from fleetops.insights.engine import build_deterministic_insight
from fleetops.insights.report import save_report, to_markdown
from fleetops.insights.schema import InsightInput


def _payload(**kw):
    data = {"metric_key": "otd", "metric_label": "OTD Ring 1", "actual": 82, "expected": 90,
            "contributors": [{"key": "otdCount", "label": "OTD Count", "actual": 400, "expected": 450}],
            "trend_values": [88, 87, 85, 82]}
    data.update(kw)
    return build_deterministic_insight(InsightInput(**data)).model_dump(by_alias=True)


def test_markdown_groups_by_severity():
    md = to_markdown([_payload(), _payload(metric_label="Avail", actual=None)])
    assert md.index("## Needs Attention") < md.index("## Watch") < md.index("## Healthy") < md.index("## Info")
    assert "**Watch OTD Ring 1**" in md
    assert "OTD Count (400 vs 450)" in md
    assert "Action 1: Prioritize delayed lanes" in md
    assert "**Info Avail**" in md


def test_save_report_writes_three_files(tmp_path):
    items = [_payload()]
    paths = save_report(items, out_dir=tmp_path)
    assert set(paths) == {"markdown", "html", "json"}
    with open(paths["json"], encoding="utf-8") as f:
        assert json.load(f) == items
    assert "<br/>" in open(paths["html"], encoding="utf-8").read()


def test_save_report_escapes_html(tmp_path):
    paths = save_report([_payload(metric_label="<b>OTD</b>")], out_dir=tmp_path)
    page = open(paths["html"], encoding="utf-8").read()
    assert "&lt;b&gt;OTD&lt;/b&gt;" in page
    assert "<b>OTD</b>" not in page
