"""
Browser Compare - metadata.json and HTML comparison report.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from capture_config import CaptureConfig
from capture_engine import CaptureOutcome


TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

DEFAULT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Browser Comparison Report</title>
</head>
<body>
<h1>Browser Comparison - {{url}}</h1>
<p>Captured: {{date}}</p>
<div id="grid"></div>
<script>
const meta = {{metadata}};
const grid = document.getElementById('grid');
meta.results.forEach(r => {
  const img = r.success === false
    ? `<p>Failed: ${r.error}</p>`
    : `<img src="screenshots/${r.filename}" alt="${r.browser} ${r.device}" loading="lazy">`;
  grid.innerHTML += `<div><h3>${r.browser} [${r.engine}] [${r.platform}]</h3>
    <p>${r.device} ${r.viewport.width}x${r.viewport.height}</p>${img}</div>`;
});
</script>
</body>
</html>
"""


def write_json(path: Path, data: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def load_template(templates_dir: Optional[Path] = None) -> str:
    template_path = (templates_dir or TEMPLATES_DIR) / "report.html"
    try:
        return template_path.read_text(encoding="utf-8")
    except OSError:
        return DEFAULT_TEMPLATE


def build_metadata(
    results: List[CaptureOutcome],
    config: CaptureConfig,
    notes: Optional[List[str]] = None,
    captured_at: Optional[str] = None,
) -> Dict[str, Any]:
    items = []
    for outcome in results:
        item = outcome.to_dict()
        # absolute paths stay on the capturing machine
        item.pop("filepath", None)
        items.append(item)
    return {
        "url": config.url,
        "captured_at": captured_at or datetime.now().isoformat(),
        "results": items,
        "notes": list(notes or []),
    }


def generate_report(
    results: List[CaptureOutcome],
    config: CaptureConfig,
    notes: Optional[List[str]] = None,
    templates_dir: Optional[Path] = None,
) -> Path:
    output_dir = config.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    metadata = build_metadata(results, config, notes)
    write_json(output_dir / "metadata.json", metadata)

    replacements = {
        # "</" would close the inline <script> early
        "metadata": json.dumps(metadata, ensure_ascii=False).replace("</", "<\\/"),
        "url": config.url,
        "date": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
    }
    html = load_template(templates_dir)
    for key, value in replacements.items():
        html = html.replace("{{" + key + "}}", str(value))

    report_path = output_dir / "index.html"
    report_path.write_text(html, encoding="utf-8")

    captured = sum(1 for r in results if r.success)
    print(f"\n✅ Report generated: {report_path}")
    print(f"📸 {captured} screenshots captured")
    return report_path
