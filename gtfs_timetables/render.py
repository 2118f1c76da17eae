# Output for TimetablePages - HTML and PDF documents and their file names

import itertools as it, operator as op, functools as ft
from pathlib import Path

import jinja2
from markupsafe import Markup, escape
from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from . import utils as u


log = u.get_logger('gtt.render')


output_formats = 'html', 'pdf'

@u.attr_struct(vals_to_attrs=True)
class RenderConf:
	formats = output_formats
	pdf_margin = 28
	pdf_row_height = 13
	pdf_font_size = 7.5


def output_base_name(page):
	'Filesystem-safe name for page output files, without extension.'
	parts = [page.route.number, page.agency_name]
	if page.service_id: parts.append(page.service_id)
	if page.page_count > 1: parts.append('page-{}'.format(page.page_index))
	parts = list(filter(None, map(u.sanitize_file_component, parts)))
	if parts: return '-'.join(parts)
	return u.sanitize_file_component(page.route.id) or 'timetable'


### HTML

html_template = '''<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>{{ route.number }} Timetable</title>
  <style>
    body { font-family: Arial, sans-serif; margin: 0; color: #111; background: #fff; }
    .sheet { width: 595px; margin: 0 auto; padding: 24px 28px 32px; box-sizing: border-box; }
    .header { display: flex; align-items: center; gap: 16px; padding-bottom: 10px; border-bottom: 2px solid #111; }
    .route-number { font-size: 40px; font-weight: 700; line-height: 1; color: #fff; background: #111;
      padding: 6px 12px; border-radius: 4px; min-width: 64px; text-align: center; }
    .route-title { font-size: 18px; font-weight: 700; text-transform: uppercase; letter-spacing: 0.3px; }
    .route-subtitle { font-size: 13px; font-weight: 600; margin-top: 4px; color: #333; }
    .agency { font-size: 11px; margin-top: 4px; color: #333; }
    .service-dates { margin-top: 12px; font-size: 10px; font-weight: 600; text-transform: uppercase; }
    .service-days { margin-top: 4px; font-size: 9px; color: #333; }
    .timetable { margin-top: 18px; border-collapse: collapse; width: 100%; font-size: 9px;
      table-layout: fixed; border: 1px solid #111; }
    .timetable th, .timetable td { border: 1px solid #222; padding: 2px 4px; text-align: center; }
    .timetable th { background: #111; color: #fff; font-weight: 600; }
    .timetable td:first-child, .timetable th:first-child { text-align: left; font-weight: 600; width: 160px; }
    .timetable tr:nth-child(even) td { background: #f5f5f5; }
    .timetable tr.major-stop td { background: #e7e7e7; }
    .timetable tr.major-stop td:first-child { font-weight: 700; text-transform: uppercase; }
    .page-index { margin-top: 8px; font-size: 9px; text-align: right; color: #333; }
  </style>
</head>
<body>
  <div class="sheet">
    <div class="header">
      <div class="route-number">{{ route.number }}</div>
      <div>
        <div class="route-title">{{ route.title }}</div>
        {%- if route.subtitle %}
        <div class="route-subtitle">{{ route.subtitle }}</div>
        {%- endif %}
        {%- if page.agency_name %}
        <div class="agency">{{ page.agency_name }}</div>
        {%- endif %}
      </div>
    </div>
    {%- if page.summary.dates %}
    <div class="service-dates">{{ page.summary.dates }}</div>
    {%- endif %}
    {%- if page.summary.days %}
    <div class="service-days">{{ page.summary.days }}</div>
    {%- endif %}
    <table class="timetable">
      <colgroup>
        <col class="stop-col">
        {%- for n in range(page.column_count - 1) %}<col>{% endfor %}
      </colgroup>
      <thead>
        <tr>{% for cell in page.headers %}<th>{{ cell | nl2br }}</th>{% endfor %}</tr>
      </thead>
      <tbody>
        {%- for row in page.rows %}
        <tr{% if page.is_major(loop.index0) %} class="major-stop"{% endif %}>
          {%- for cell in row %}<td>{{ cell | nl2br }}</td>{% endfor -%}
        </tr>
        {%- endfor %}
      </tbody>
    </table>
    {%- if page.page_count > 1 %}
    <div class="page-index">{{ page.page_index }} / {{ page.page_count }}</div>
    {%- endif %}
  </div>
</body>
</html>
'''

def nl2br(value):
	return Markup('<br>').join(escape(value).split('\n'))

_html_env = None

def get_html_template():
	global _html_env
	if not _html_env:
		_html_env = jinja2.Environment(autoescape=True, keep_trailing_newline=True)
		_html_env.filters['nl2br'] = nl2br
	return _html_env.from_string(html_template)

def render_html(page):
	'Return HTML document for TimetablePage as a string.'
	return get_html_template().render(page=page, route=page.route)


### PDF

class PDFTableWriter:
	'''Draws TimetablePage onto reportlab canvas.
		Coordinates here are from top-left corner, and converted for canvas calls,
			which have origin at the bottom-left one.'''

	font, font_bold = 'Helvetica', 'Helvetica-Bold'
	color_text, color_alt, color_major = HexColor('#111111'), HexColor('#f5f5f5'), HexColor('#e7e7e7')
	cell_pad_x, cell_pad_y = 2, 2

	def __init__(self, page, dst, conf=None):
		self.page, self.conf = page, conf or RenderConf()
		self.width, self.height = A4
		self.margin = self.conf.pdf_margin
		self.c = canvas.Canvas(dst, pagesize=A4)
		self.c.setTitle('{} Timetable'.format(page.route.number))
		if page.agency_name: self.c.setAuthor(page.agency_name)

	def y(self, y_top): return self.height - y_top

	def text_fit(self, text, width, font, size):
		'Truncate text to fit into specified width.'
		if stringWidth(text, font, size) <= width: return text
		while text and stringWidth(text + '…', font, size) > width: text = text[:-1]
		return text + '…' if text else ''

	def draw_header(self):
		c, route, summary = self.c, self.page.route, self.page.summary
		left, top = self.margin, self.margin

		badge_pad, badge_h = 10, 46
		badge_w = max(64, stringWidth(route.number, self.font_bold, 38) + badge_pad * 2)
		c.setFillColor(self.color_text)
		c.rect(left, self.y(top + badge_h), badge_w, badge_h, stroke=0, fill=1)
		c.setFillColor(HexColor('#ffffff'))
		c.setFont(self.font_bold, 34)
		c.drawCentredString(left + badge_w / 2, self.y(top + 38), route.number)

		c.setFillColor(self.color_text)
		title_x = left + badge_w + 12
		title_w = self.width - self.margin - title_x
		c.setFont(self.font_bold, 16)
		c.drawString( title_x, self.y(top + 24),
			self.text_fit(route.title, title_w, self.font_bold, 16) )
		if route.subtitle:
			c.setFont(self.font, 12)
			c.drawString( title_x, self.y(top + 42),
				self.text_fit(route.subtitle, title_w, self.font, 12) )
		if self.page.agency_name:
			c.setFont(self.font, 9)
			c.drawString( title_x, self.y(top + 58),
				self.text_fit(self.page.agency_name, title_w, self.font, 9) )

		line_y = self.y(top + 68)
		c.setLineWidth(1)
		c.setStrokeColor(self.color_text)
		c.line(left, line_y, self.width - self.margin, line_y)
		if summary.dates:
			c.setFont(self.font_bold, 9)
			c.drawString(left, self.y(top + 86), summary.dates.upper())
		if summary.days:
			c.setFont(self.font, 8)
			c.drawString(left, self.y(top + 100), summary.days)
		return top + 110

	def column_widths(self):
		table_w = self.width - self.margin * 2
		n = self.page.column_count
		w0 = min(180, table_w * 0.32)
		wn = (table_w - w0) / (n - 1) if n > 1 else table_w
		return [w0] + [wn] * (n - 1) if n > 1 else [table_w]

	def draw_row(self, cells, y_top, widths, fill=None, bold_first=False, color=None):
		c, row_h, size = self.c, self.conf.pdf_row_height, self.conf.pdf_font_size
		if fill:
			c.setFillColor(fill)
			c.rect(self.margin, self.y(y_top + row_h), sum(widths), row_h, stroke=0, fill=1)
		c.setLineWidth(0.5)
		c.setStrokeColor(self.color_text)
		x = self.margin
		for n, (cell, w) in enumerate(zip(cells, widths)):
			c.rect(x, self.y(y_top + row_h), w, row_h, stroke=1, fill=0)
			font = self.font_bold if n == 0 and bold_first else self.font
			text = self.text_fit(str(cell).replace('\n', ' '), w - self.cell_pad_x * 2, font, size)
			c.setFont(font, size)
			c.setFillColor(color or self.color_text)
			text_y = self.y(y_top + row_h - self.cell_pad_y - 1)
			if n == 0: c.drawString(x + self.cell_pad_x, text_y, text)
			else: c.drawCentredString(x + w / 2, text_y, text)
			x += w

	def draw_table(self, y_top):
		row_h, widths = self.conf.pdf_row_height, self.column_widths()
		y_max = self.height - self.margin
		draw_headers = lambda y: self.draw_row( self.page.headers, y, widths,
			fill=self.color_text, bold_first=True, color=HexColor('#ffffff') )
		draw_headers(y_top)
		y_top += row_h
		for n, row in enumerate(self.page.rows):
			if y_top + row_h > y_max:
				self.c.showPage()
				y_top = self.margin
				draw_headers(y_top)
				y_top += row_h
			major = self.page.is_major(n)
			fill = self.color_major if major else (self.color_alt if n % 2 == 1 else None)
			self.draw_row(row, y_top, widths, fill=fill, bold_first=major)
			y_top += row_h

	def write(self):
		self.draw_table(self.draw_header())
		self.c.showPage()
		self.c.save()

def render_pdf(page, dst, conf=None):
	'Write PDF document for TimetablePage to dst file-like object or path.'
	PDFTableWriter(page, dst, conf).write()


### Files

def write_timetable(page, output_dir, conf=None):
	'Write TimetablePage into files with configured formats, returning list of their paths.'
	conf, paths = conf or RenderConf(), list()
	mode_new = u.umask_file_mode()
	output_dir = Path(output_dir)
	output_dir.mkdir(parents=True, exist_ok=True)
	name = output_base_name(page)
	for fmt in conf.formats:
		p = output_dir / '{}.{}'.format(name, fmt)
		if fmt == 'html':
			with u.safe_replacement(p, mode_new=mode_new, encoding='utf-8') as dst: dst.write(render_html(page))
		elif fmt == 'pdf':
			with u.safe_replacement(p, 'wb', mode_new=mode_new) as dst: render_pdf(page, dst, conf)
		else: raise ValueError('Unsupported output format: {!r}'.format(fmt))
		log.debug('Wrote {} for {!r}: {}', fmt, page, p)
		paths.append(p)
	return paths
