import unittest, tempfile, re, os, io, stat

from . import _common as c

gtt = c.gtt
render = gtt.render


def make_page(**kws):
	page, = gtt.engine.build_timetables(c.feed_tables(c.load_feed_data('basic')))
	for k, v in kws.items(): setattr(page, k, v)
	return page


class OutputNameTests(unittest.TestCase):

	def test_name_with_pages(self):
		name = render.output_base_name(make_page(page_index=2, page_count=2))
		self.assertEqual(name, '482-City_Transit-page-2')
		for part in '482', 'City_Transit', 'page-2': self.assertIn(part, name)
		self.assertRegex(name, r'^[A-Za-z0-9_.-]+$')

	def test_name_single_page(self):
		self.assertEqual(render.output_base_name(make_page()), '482-City_Transit')

	def test_name_service_id(self):
		name = render.output_base_name(make_page(service_id='Mon-Fri / school', page_count=3))
		self.assertEqual(name, '482-City_Transit-Mon-Fri_school-page-1')

	def test_name_sanitized(self):
		route = gtt.t.Route('r:1', ' A/B ', '', '', '')
		name = render.output_base_name(make_page(route=route, agency_name='Bus * Co <x>'))
		self.assertEqual(name, 'AB-Bus_Co_x')

	def test_name_fallback(self):
		route = gtt.t.Route('r/1', '???', '', '', '')
		self.assertEqual(render.output_base_name(make_page(route=route, agency_name='')), 'r1')
		route = gtt.t.Route('|', '', '', '', '')
		self.assertEqual(render.output_base_name(make_page(route=route, agency_name='')), 'timetable')


class HTMLTests(unittest.TestCase):

	def test_document(self):
		html = render.render_html(make_page())
		self.assertTrue(html.startswith('<!DOCTYPE html>'))
		self.assertIn('<title>482 Timetable</title>', html)
		self.assertIn('Downtown - Airport', html)
		self.assertIn('Express service', html)
		self.assertIn('Valid from 01/01/2024 to 31/12/2024', html)
		self.assertIn('from Monday to Friday', html)
		self.assertEqual(html.count('class="major-stop"'), 1)
		self.assertIn('<tr class="major-stop"><td>CENTRAL STATION</td><td>07:30</td><td>08:00</td></tr>', html)
		self.assertIn('<th>Airport</th>', html)
		self.assertNotIn('page-index', html.split('</style>')[1])

	def test_escaping(self):
		route = gtt.t.Route('r1', '<b>', 'A & B', '"quoted"', '')
		page = make_page(route=route, headers=['Stop', 'To\nAirport', 'x'])
		html = render.render_html(page)
		self.assertIn('&lt;b&gt;', html)
		self.assertIn('A &amp; B', html)
		self.assertIn('&#34;quoted&#34;', html)
		self.assertIn('<th>To<br>Airport</th>', html)
		self.assertNotIn('<b>', html)

	def test_no_subtitle_without_long_name(self):
		route = gtt.t.Route('r1', '482', '', 'Some description', '')
		html = render.render_html(make_page(route=route))
		self.assertNotIn('Some description', html)
		self.assertIn('<div class="route-title">r1</div>', html)


class PDFTests(unittest.TestCase):

	def render(self, page):
		buff = io.BytesIO()
		render.render_pdf(page, buff)
		return buff.getvalue()

	def test_document(self):
		data = self.render(make_page())
		self.assertTrue(data.startswith(b'%PDF'))
		self.assertIn(b'%%EOF', data[-32:])
		self.assertEqual(len(re.findall(rb'/Type\s*/Page\b', data)), 1)

	def test_long_header_text_fits(self):
		page = make_page(agency_name='Regional Transit Authority of ' * 20)
		writer, drawn = render.PDFTableWriter(page, io.BytesIO()), list()
		draw_string = writer.c.drawString
		def draw_string_wrapper(x, y, text, *args, **kws):
			drawn.append((x, text))
			return draw_string(x, y, text, *args, **kws)
		writer.c.drawString = draw_string_wrapper
		writer.draw_header()
		x, text = next((x, text) for x, text in drawn if text.startswith('Regional'))
		self.assertTrue(text.endswith('…'))
		self.assertLessEqual(
			x + render.stringWidth(text, writer.font, 9), writer.width - writer.margin )
		self.assertTrue(self.render(page).startswith(b'%PDF'))

	def test_row_overflow_adds_pages(self):
		rows = list(['Stop {}'.format(n), '08:00', ''] for n in range(150))
		page = make_page(rows=rows, stop_ids=list('x{}'.format(n) for n in range(150)))
		data = self.render(page)
		self.assertGreater(len(re.findall(rb'/Type\s*/Page\b', data)), 1)


class WriteTests(unittest.TestCase):

	def test_write_files(self):
		with tempfile.TemporaryDirectory() as tmp:
			out = c.Path(tmp) / 'out'
			paths = render.write_timetable(make_page(), out)
			self.assertEqual(
				sorted(p.name for p in paths),
				['482-City_Transit.html', '482-City_Transit.pdf'] )
			self.assertEqual(sorted(p.name for p in out.iterdir()), sorted(p.name for p in paths))
			self.assertIn('CENTRAL STATION', (out / '482-City_Transit.html').read_text(encoding='utf-8'))
			self.assertTrue((out / '482-City_Transit.pdf').read_bytes().startswith(b'%PDF'))

	def test_write_formats(self):
		with tempfile.TemporaryDirectory() as tmp:
			conf = render.RenderConf(formats=('html',))
			paths = render.write_timetable(make_page(), tmp, conf)
			self.assertEqual(list(p.name for p in paths), ['482-City_Transit.html'])
			with self.assertRaises(ValueError):
				render.write_timetable(make_page(), tmp, render.RenderConf(formats=('svg',)))

	def test_new_file_mode(self):
		umask = os.umask(0o027)
		try:
			with tempfile.TemporaryDirectory() as tmp:
				for p in render.write_timetable(make_page(), tmp):
					self.assertEqual(stat.S_IMODE(p.stat().st_mode), 0o640, p)
				p.chmod(0o600) # existing file keeps its mode on rewrite
				render.write_timetable(make_page(), tmp)
				self.assertEqual(stat.S_IMODE(p.stat().st_mode), 0o600)
		finally: os.umask(umask)
