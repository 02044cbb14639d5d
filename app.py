"""
Simple web frontend for the Cheat Sheet Generator.
Paste an AI outline (or build the prompt from uploaded documents), get a PDF.
"""

import io
import logging

from flask import Flask, request, render_template_string, send_file, jsonify

from config import configure_logging, load_settings
from errors import RenderError, ValidationError
from layout import LayoutStyle, layout_outline
from limits import normalize_outline
from main import generate_pdf
from models import Outline
from parser import outline_from_dict, parse_ai_output
from prompt_template import build_prompt

# Document extractors
try:
    import fitz  # PyMuPDF
    HAS_PDF = True
except ImportError:
    HAS_PDF = False

try:
    import docx
    HAS_DOCX = True
except ImportError:
    HAS_DOCX = False

logger = logging.getLogger(__name__)

app = Flask(__name__)
settings = load_settings()


def extract_text_from_file(file) -> str:
    """Extract text from uploaded file (PDF, DOCX, TXT)."""
    filename = file.filename.lower()
    content = file.read()

    if filename.endswith('.pdf') and HAS_PDF:
        with fitz.open(stream=content, filetype="pdf") as doc:
            return "".join(page.get_text() for page in doc)

    if filename.endswith('.docx') and HAS_DOCX:
        document = docx.Document(io.BytesIO(content))
        return "\n".join(p.text for p in document.paragraphs)

    # .txt, .md and anything else: try as plain text
    return content.decode('utf-8', errors='ignore')


HTML_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <title>Cheat Sheet Generator</title>
    <style>
        * { box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            max-width: 850px;
            margin: 40px auto;
            padding: 20px;
            background: #f5f5f5;
        }
        h1 { color: #333; margin-bottom: 30px; }
        .section {
            background: white;
            padding: 20px;
            border-radius: 8px;
            margin-bottom: 20px;
            box-shadow: 0 1px 3px rgba(0,0,0,0.1);
        }
        label { display: block; font-weight: 600; margin-bottom: 8px; color: #444; }
        textarea, input[type="text"] {
            width: 100%;
            padding: 10px;
            border: 1px solid #ddd;
            border-radius: 4px;
            font-family: monospace;
            font-size: 13px;
            margin-bottom: 12px;
        }
        textarea { min-height: 150px; resize: vertical; }
        button {
            background: #0d7377;
            color: white;
            border: none;
            padding: 12px 24px;
            border-radius: 4px;
            cursor: pointer;
            font-size: 14px;
            font-weight: 600;
        }
        button:hover { background: #0a5c5f; }
        .error { color: #c44536; background: #fee; padding: 10px; border-radius: 4px; }
        .prompt-box {
            background: #f8f8f8;
            border: 1px solid #ddd;
            padding: 15px;
            border-radius: 4px;
            font-family: monospace;
            font-size: 11px;
            white-space: pre-wrap;
            max-height: 400px;
            overflow-y: auto;
        }
    </style>
</head>
<body>
    <h1>Cheat Sheet Generator</h1>

    <div class="section">
        <form id="prompt-form">
            <label>1. Build the prompt</label>
            <input type="text" name="title" placeholder="Course or document title">
            <input type="file" name="files" multiple accept=".txt,.md,.pdf,.docx">
            <textarea name="manual_content" placeholder="...or paste notes here"></textarea>
            <button type="submit">Get prompt</button>
        </form>
        <div id="prompt-result"></div>
    </div>

    <div class="section">
        <label>2. Paste the AI answer (JSON outline)</label>
        <input type="text" id="title" placeholder="Cover title">
        <input type="text" id="subtitle" placeholder="Cover subtitle (optional)">
        <textarea id="ai-output"></textarea>
        <button onclick="generate()">Generate PDF</button>
        <div id="result"></div>
    </div>

    <script>
        document.getElementById('prompt-form').onsubmit = async (e) => {
            e.preventDefault();
            const resp = await fetch('/prompt', {method: 'POST', body: new FormData(e.target)});
            const data = await resp.json();
            const out = document.getElementById('prompt-result');
            out.innerHTML = data.error
                ? `<p class="error">${data.error}</p>`
                : `<div class="prompt-box"></div>`;
            if (!data.error) out.firstChild.textContent = data.prompt;
        };

        async function generate() {
            const result = document.getElementById('result');
            const resp = await fetch('/generate', {
                method: 'POST',
                headers: {'Content-Type': 'application/json'},
                body: JSON.stringify({
                    ai_output: document.getElementById('ai-output').value,
                    title: document.getElementById('title').value,
                    subtitle: document.getElementById('subtitle').value,
                }),
            });
            if (!resp.ok) {
                const data = await resp.json();
                result.innerHTML = `<p class="error">${data.error}</p>`;
                return;
            }
            const blob = await resp.blob();
            const a = document.createElement('a');
            a.href = URL.createObjectURL(blob);
            a.download = 'cheatsheet.pdf';
            a.click();
            result.textContent = `${resp.headers.get('X-Page-Count')} pages`;
        }
    </script>
</body>
</html>
"""


def _outline_from_request(data: dict) -> Outline:
    """Accept either raw AI text ('ai_output') or a decoded outline ('outline')."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    title = data.get('title') or "Cheat Sheet"
    subtitle = data.get('subtitle') or ''
    footer = data.get('footer') or settings.footer

    if data.get('outline') is not None:
        return outline_from_dict(data['outline'], title=title, subtitle=subtitle, footer=footer)

    ai_output = data.get('ai_output', '')
    if not ai_output:
        raise ValidationError('No AI output provided')
    return Outline(title=title, subtitle=subtitle, footer=footer,
                   sections=parse_ai_output(ai_output))


def _style() -> LayoutStyle:
    return LayoutStyle.for_page_size(settings.page_size)


@app.errorhandler(ValidationError)
def handle_validation_error(e):
    return jsonify({'error': str(e)}), 400


@app.errorhandler(RenderError)
def handle_render_error(e):
    logger.error("PDF generation failed: %s", e)
    return jsonify({'error': 'Failed to generate PDF'}), 500


@app.route('/')
def index():
    return render_template_string(HTML_TEMPLATE)


@app.route('/generate', methods=['POST'])
def generate():
    data = request.get_json(silent=True) or {}
    outline = _outline_from_request(data)

    rendered = generate_pdf(outline, _style())

    response = send_file(
        io.BytesIO(rendered.pdf_bytes),
        mimetype=rendered.mimetype,
        as_attachment=True,
        download_name='cheatsheet.pdf'
    )
    response.headers['X-Page-Count'] = str(rendered.page_count)
    response.headers['X-Byte-Size'] = str(rendered.byte_size)
    return response


@app.route('/normalize', methods=['POST'])
def normalize():
    """Return the outline exactly as it will be rendered, plus trimming stats."""
    data = request.get_json(silent=True) or {}
    outline = _outline_from_request(data)
    normalized = normalize_outline(outline)

    return jsonify({
        'outline': normalized.to_dict(),
        'stats': {
            'sectionsIn': len(outline.sections),
            'sectionsOut': len(normalized.sections),
            'itemsIn': outline.item_count,
            'itemsOut': normalized.item_count,
        },
    })


@app.route('/estimate-pages', methods=['POST'])
def estimate_pages():
    """Page count of the finished PDF, computed from the layout alone."""
    data = request.get_json(silent=True) or {}
    outline = normalize_outline(_outline_from_request(data))
    document = layout_outline(outline, _style())

    return jsonify({
        'pageCount': document.page_count,
        'sectionPages': document.section_pages,
    })


@app.route('/prompt', methods=['POST'])
def generate_prompt():
    title = request.form.get('title', '').strip() or "Untitled Course"
    manual_content = request.form.get('manual_content', '')

    # Extract text from uploaded files
    all_content = []

    files = request.files.getlist('files')
    for file in files:
        if file.filename:
            text = extract_text_from_file(file)
            if text.strip():
                all_content.append(f"### {file.filename}\n{text}")

    # Add manual content
    if manual_content.strip():
        all_content.append(f"### Manual Notes\n{manual_content}")

    if not all_content:
        return jsonify({'error': 'No source content provided (upload files or paste text)'}), 400

    system_prompt, user_prompt = build_prompt(title, "\n\n".join(all_content))

    # Combine for easy copy-paste
    full_prompt = f"""{system_prompt}

---

{user_prompt}"""

    return jsonify({'prompt': full_prompt})


if __name__ == '__main__':
    configure_logging(settings.log_level)

    print("\n" + "="*50)
    print("  Cheat Sheet Generator")
    print(f"  Open: http://localhost:{settings.port}")
    print(f"  PDF support: {'Yes' if HAS_PDF else 'No (install PyMuPDF)'}")
    print(f"  DOCX support: {'Yes' if HAS_DOCX else 'No (install python-docx)'}")
    print("="*50 + "\n")
    app.run(debug=settings.debug, host='0.0.0.0', port=settings.port)
