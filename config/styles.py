"""
Stylesheet for printable reports.

The print document links no external resources; everything it needs
is inlined here. Cell tones map to CSS classes (tone-saving,
tone-premium, tone-low, tone-ok) so colours live in one place.
"""

from .constants import COLOR_NEUTRAL, COLOR_PREMIUM, COLOR_SAVING


TONE_CSS = f"""
.tone-saving {{ color: {COLOR_SAVING}; font-weight: 600; }}
.tone-premium {{ color: {COLOR_PREMIUM}; font-weight: 600; }}
.tone-low {{ color: {COLOR_PREMIUM}; }}
.tone-ok {{ color: {COLOR_NEUTRAL}; }}
"""

PRINT_CSS = """
<style>
/* === BASE === */
:root {
    --color-primary: #111827;
    --color-text: #000;
    --color-text-muted: #6b7280;
    --color-border: #e5e7eb;
    --color-background-alt: #f9fafb;

    --font-family-sans: system-ui, -apple-system, 'Segoe UI', Roboto, Arial, sans-serif;
    --font-size-base: 12px;
    --spacing-s: 6px;
    --spacing-m: 12px;
    --spacing-l: 24px;
}

* {
    box-sizing: border-box;
}

@page {
    size: A4;
    margin: 12mm;
}

body {
    font-family: var(--font-family-sans);
    font-size: var(--font-size-base);
    color: var(--color-text);
    padding: var(--spacing-l);
}

/* === HEADER === */
.page-header {
    margin-bottom: var(--spacing-m);
}

.page-header__title {
    font-size: 18px;
    margin: 0 0 4px;
}

.page-header__meta {
    color: var(--color-text-muted);
    font-size: 11px;
}

/* === TABLE === */
.data-table {
    width: 100%;
    border-collapse: collapse;
}

.data-table th,
.data-table td {
    border: 1px solid var(--color-border);
    padding: var(--spacing-s) 8px;
    text-align: left;
    vertical-align: top;
}

.data-table th {
    background: var(--color-background-alt);
}

.data-table tr {
    page-break-inside: avoid;
}

.align-right {
    text-align: right !important;
}

.empty-row {
    text-align: center !important;
    color: var(--color-text-muted);
}
""" + TONE_CSS + """
@media print {
    body {
        padding: 0;
        print-color-adjust: exact;
        -webkit-print-color-adjust: exact;
    }
}
</style>
"""
