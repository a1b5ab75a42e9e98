"""
Field table and the dashboard tile.

FIELDS is in display order. Each entry maps an Airthings sample key to the
attribute it is published as, with the label, unit and number of decimals
used on the tile.
"""

from typing import NamedTuple
import html


class Field(NamedTuple):
    key: str            # Airthings sample key
    attribute: str      # published attribute name
    label: str
    unit: str
    decimals: int


class TileRow(NamedTuple):
    label: str
    value: str
    unit: str


FIELDS = [
    Field('co2',               'carbonDioxide',     'CO2',      'ppm',   0),
    Field('voc',               'voc',               'VOC',      'ppb',   0),
    Field('radonShortTermAvg', 'radonShortTermAvg', 'Radon',    'pCi/L', 1),
    Field('humidity',          'humidity',          'Humidity', '%rh',   0),
    Field('temp',              'temperature',       'Temp',     'C',     1),
    Field('pm25',              'airQualityPM25',    'PM 2.5',   'µg/m³', 0),
    Field('pm1',               'airQualityPM1',     'PM 1',     'µg/m³', 0),
    Field('pressure',          'pressure',          'Pressure', 'hPa',   0),
    Field('battery',           'battery',           'Battery',  '%',     0),
]

TILE_ATTRIBUTE = 'tile'
TABLE_OPEN = '<table style="display:inline;font-size:70%">'
TABLE_CLOSE = '</table>'
CELL_STYLE = 'background-color: rgba(0, 255, 0, 0.0);'


def format_value(value, decimals):
    """Format a number with exactly `decimals` digits after the point"""
    return f"{float(value):.{decimals}f}"

def tile_row(field: Field, value):
    return TileRow(field.label, format_value(value, field.decimals), field.unit)

def render_tile_html(rows):
    """Render rows as the HTML table shown on dashboards"""
    cells = "".join(f"<tr><td>{html.escape(row.label)}</td><td style='{CELL_STYLE}'>"
                    f"{html.escape(row.value)} {html.escape(row.unit)}</td></tr>"
                    for row in rows)
    return TABLE_OPEN + cells + TABLE_CLOSE

def render_tile_text(rows):
    """One `label / value unit` line per row"""
    return "\n".join(f"{row.label} / {row.value} {row.unit}" for row in rows)
