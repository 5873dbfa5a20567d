# fleetops/insights/report.py
from __future__ import annotations
from typing import Dict, Any, List, Optional
from pathlib import Path
from datetime import datetime
import html
import json

from fleetops.config import REPORTS_DIR
from .config import SEVERITY_LABELS, TREND_STABLE_PCT, SEVERITY_HEALTHY_MAX, SEVERITY_WARNING_MAX
from .engine import format_number

# Orden de secciones: lo más urgente primero
_SECTIONS = ["critical", "warning", "healthy", "unknown"]


def _section_md(title: str) -> str:
    return f"\n## {title}\n"


def _insight_md(it: Dict[str, Any]) -> str:
    md = f"- **{it['headline']}** — {it['summary']}  \n"
    contributors = it.get("topContributors") or []
    if contributors:
        why = ", ".join(
            f"{c['label']} ({format_number(c.get('actual'))} vs {format_number(c.get('expected'))})"
            for c in contributors
        )
        md += f"  *Contribuyentes:* {why}  \n"
    for a in it.get("actions") or []:
        md += f"  - {a['title']}: {a['description']}\n"
    return md


def to_markdown(items: List[Dict[str, Any]], title: str = "Reporte de Insights — Fleet Ops KPIs") -> str:
    """items: insights serializados con alias camelCase (model_dump(by_alias=True))."""
    ts = datetime.now().strftime("%Y-%m-%d %H:%M")
    md = f"# {title}\n\n_Generado: {ts}_\n"

    for severity in _SECTIONS:
        group = [it for it in items if it.get("severity") == severity]
        md += _section_md(SEVERITY_LABELS[severity])
        if not group:
            md += "_Sin hallazgos relevantes._\n"
            continue
        for it in group:
            md += _insight_md(it)

    md += (
        "\n---\n"
        f"_Criterios: gap < {SEVERITY_HEALTHY_MAX:.0%} healthy, ≤ {SEVERITY_WARNING_MAX:.0%} watch; "
        f"tendencia estable si |Δ| ≤ {TREND_STABLE_PCT:.0f}% vs baseline._\n"
    )
    return md


def save_report(items: List[Dict[str, Any]], out_dir: Optional[Path] = None, base_name: str = "kpi_insights") -> Dict[str, str]:
    out = Path(out_dir) if out_dir is not None else REPORTS_DIR
    out.mkdir(parents=True, exist_ok=True)
    md = to_markdown(items)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    md_path = out / f"{base_name}_{ts}.md"
    html_path = out / f"{base_name}_{ts}.html"
    json_path = out / f"{base_name}_{ts}.json"

    md_path.write_text(md, encoding="utf-8")

    # labels y summaries vienen del backend: se escapan antes de insertarlos
    body = "<br/>\n".join(html.escape(line) for line in md.splitlines())
    page = (
        "<!doctype html><html><head>"
        '<meta charset="utf-8"><title>KPI Insights</title>'
        "<style>body{font-family:system-ui,sans-serif;max-width:880px;margin:2rem auto}</style>"
        f"</head><body>{body}</body></html>"
    )
    html_path.write_text(page, encoding="utf-8")

    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(items, f, ensure_ascii=False, indent=2)

    return {"markdown": str(md_path), "html": str(html_path), "json": str(json_path)}
