from __future__ import annotations

# Print-friendly palette; the blue matches the title bar of the browser client.
REPORT_COLORS = {
    "primary": "#2980b9",
    "on_primary": "#ffffff",
    "text_primary": "#1f2328",
    "text_secondary": "#4b5563",
    "text_muted": "#8a8f98",
    "border": "#c8ccd2",
    "surface": "#f7f8fa",
    "table_row_border": "#dde1e6",
    "table_zebra_bg": "#fafbfc",
    "status_pass": "#27ae60",
    "status_fail": "#c0392b",
    "status_na": "#95a5a6",
    "signature_rule": "#6b7280",
}
