from __future__ import annotations
from typing import Iterable, List

from bs4 import BeautifulSoup

from .errors import MissingSurfaceError

REQUIRED_SURFACES = (
    "selectFilesBtn",
    "fileInput",
    "previewGrid",
    "generateScriptBtn",
    "pythonScriptOutput",
    "fileCount",
    "copyScriptBtn",
    "clearBtn",
    "durationInput",
    "layoutSelect",
    "downloadLink",
)


def missing_surfaces(html: str, required: Iterable[str] = REQUIRED_SURFACES) -> List[str]:
    soup = BeautifulSoup(html, "html.parser")
    present = {el.get("id") for el in soup.find_all(id=True)}
    return [i for i in required if i not in present]


def validate_surfaces(html: str, required: Iterable[str] = REQUIRED_SURFACES) -> str:
    missing = missing_surfaces(html, required)
    if missing:
        raise MissingSurfaceError(missing)
    return html


def _css() -> str:
    return """
:root { --bg:#121212; --panel:#1e1e1e; --text:#e0e0e0; --muted:#a0a0a0; --accent:#4caf50; --err:#ef5350; }
* { box-sizing: border-box; }
body { margin:0; padding:24px; background:var(--bg); color:var(--text);
       font-family: system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial, sans-serif; }
h1 { margin:0 0 16px; font-size:22px; }
.row { display:flex; gap:10px; align-items:center; flex-wrap:wrap; margin-bottom:14px; }
button { background:var(--accent); color:#fff; border:0; border-radius:6px; padding:8px 14px; cursor:pointer; }
button:disabled { background:#555; cursor:not-allowed; }
button.secondary { background:#333; }
input[type=number], select { background:var(--panel); color:var(--text); border:1px solid #333; border-radius:6px; padding:6px; }
#previewGrid { display:grid; grid-template-columns:repeat(auto-fill, minmax(140px, 1fr)); gap:10px; margin-bottom:18px; }
.grid-item { background:var(--panel); border-radius:6px; min-height:100px; display:flex; align-items:center;
             justify-content:center; overflow:hidden; }
.grid-item img, .grid-item video { width:100%; height:100%; object-fit:cover; }
.grid-item.text { font-size:12px; word-break:break-all; padding:5px; color:var(--muted); }
.grid-item.error { color:var(--err); }
textarea { width:100%; min-height:320px; background:var(--panel); color:var(--text); border:1px solid #333;
           border-radius:6px; padding:10px; font-family: ui-monospace, Menlo, Consolas, monospace; font-size:12px; }
a { color:var(--accent); }
"""


def _js() -> str:
    return r"""
const $ = (id) => document.getElementById(id);
const selectFilesBtn = $('selectFilesBtn');
const fileInput = $('fileInput');
const previewGrid = $('previewGrid');
const generateScriptBtn = $('generateScriptBtn');
const pythonScriptOutput = $('pythonScriptOutput');
const fileCountSpan = $('fileCount');
const copyScriptBtn = $('copyScriptBtn');
const clearBtn = $('clearBtn');
const durationInput = $('durationInput');
const layoutSelect = $('layoutSelect');
const downloadLink = $('downloadLink');

let generation = 0;
let pollTimer = null;

function placeholderEl(p) {
  const item = document.createElement('div');
  item.classList.add('grid-item');
  if (p.status === 'error') {
    item.classList.add('text', 'error');
    item.textContent = p.label;
    item.title = p.error || '';
  } else if (p.kind === 'inlineData') {
    if (p.status === 'ready') {
      const img = document.createElement('img');
      img.src = p.uri;
      img.alt = p.name;
      item.appendChild(img);
    } else {
      item.classList.add('text');
      item.textContent = 'Loading ' + p.name + '...';
    }
  } else if (p.kind === 'transientResourceURL') {
    const video = document.createElement('video');
    video.src = p.uri;
    video.muted = true;
    video.loop = true;
    video.playsInline = true;
    video.autoplay = true;
    item.appendChild(video);
  } else {
    item.classList.add('text');
    item.textContent = p.name;
  }
  return item;
}

function applyView(view) {
  // Late answers for a superseded selection are dropped
  if (view.generation < generation) return;
  generation = view.generation;
  previewGrid.replaceChildren(...view.placeholders.map(placeholderEl));
  fileCountSpan.textContent = view.file_count_label;
  generateScriptBtn.disabled = view.file_count === 0;
  copyScriptBtn.disabled = !view.copy_enabled;
  downloadLink.hidden = !view.copy_enabled;
  if (!view.copy_enabled) pythonScriptOutput.value = '';
  clearTimeout(pollTimer);
  if (view.pending > 0) {
    const expected = view.generation;
    pollTimer = setTimeout(async () => {
      const r = await fetch('/selection');
      const next = await r.json();
      if (next.generation === expected || next.generation > generation) applyView(next);
    }, 300);
  }
}

async function sendSelection(files) {
  const body = new FormData();
  for (const f of files) body.append('files', f, f.name);
  const r = await fetch('/selection', { method: 'POST', body });
  applyView(await r.json());
}

selectFilesBtn.addEventListener('click', () => fileInput.click());
fileInput.addEventListener('change', async (e) => {
  await sendSelection(Array.from(e.target.files));
  fileInput.value = '';
});
clearBtn.addEventListener('click', async () => {
  const r = await fetch('/selection', { method: 'DELETE' });
  applyView(await r.json());
});

generateScriptBtn.addEventListener('click', async () => {
  const payload = { layout: layoutSelect.value };
  const d = parseFloat(durationInput.value);
  if (!Number.isNaN(d) && d > 0) payload.duration = d;
  const r = await fetch('/script', {
    method: 'POST', headers: { 'Content-Type': 'application/json' }, body: JSON.stringify(payload),
  });
  const data = await r.json();
  if (!r.ok) {
    copyScriptBtn.disabled = true;
    downloadLink.hidden = true;
    alert(typeof data.detail === 'string' ? data.detail : 'Could not generate the script.');
    return;
  }
  pythonScriptOutput.value = data.script;
  copyScriptBtn.disabled = !data.copy_enabled;
  downloadLink.hidden = !data.copy_enabled;
});

function tryCopyExecCommand() {
  try {
    pythonScriptOutput.select();
    pythonScriptOutput.setSelectionRange(0, pythonScriptOutput.value.length);
    if (!document.execCommand('copy')) throw new Error('execCommand returned false');
    alert('Python script copied to clipboard!');
  } catch (err) {
    console.error('Failed to copy script using execCommand: ', err);
    alert('Failed to copy script automatically. Please copy it manually.');
  }
  window.getSelection().removeAllRanges();
}

copyScriptBtn.addEventListener('click', async () => {
  if (!pythonScriptOutput.value) return;
  if (navigator.clipboard && navigator.clipboard.writeText) {
    try {
      await navigator.clipboard.writeText(pythonScriptOutput.value);
      alert('Python script copied to clipboard!');
      return;
    } catch (err) {
      console.error('Failed to copy script using Clipboard API: ', err);
    }
  }
  tryCopyExecCommand();
});

fetch('/selection').then((r) => r.json()).then(applyView);
"""


def render_page(default_duration: float = 7.0, default_layout: str = "gridCentered") -> str:
    layouts = ["gridCentered", "gridStatic", "randomScatterNonOverlapping", "animatedStaggered"]
    options = "".join(
        f'<option value="{name}"{" selected" if name == default_layout else ""}>{name}</option>'
        for name in layouts
    )
    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Composite Studio</title>
  <style>{_css()}</style>
</head>
<body>
  <h1>Composite Studio</h1>
  <div class="row">
    <button id="selectFilesBtn">Select images / videos</button>
    <input id="fileInput" type="file" accept="image/*,video/*" multiple hidden />
    <button id="clearBtn" class="secondary">Clear</button>
    <span id="fileCount">0 files selected</span>
  </div>
  <div id="previewGrid"></div>
  <div class="row">
    <label>Duration (s) <input id="durationInput" type="number" min="1" step="0.5" value="{default_duration:g}" /></label>
    <label>Layout <select id="layoutSelect">{options}</select></label>
    <button id="generateScriptBtn" disabled>Generate Python script</button>
    <button id="copyScriptBtn" disabled>Copy script</button>
    <a id="downloadLink" href="/script/download" hidden>Download .py</a>
  </div>
  <textarea id="pythonScriptOutput" readonly placeholder="The generated script appears here"></textarea>
  <script>{_js()}</script>
</body>
</html>
"""
