"""
Excel renderings of report cards and the summary statistics document.
"""
import base64
import binascii
import logging
from io import BytesIO

import openpyxl
from openpyxl.drawing.image import Image as XLImage
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from . import config
from .grading import grade_for_average, round_half_up

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

ENGLISH_HEADER = (
    "Republic of Cameroon\n"
    "Peace – Work – Fatherland\n"
    "MINISTRY OF SECONDARY EDUCATION\n"
    "GOVERNMENT TECHNICAL TEACHER TRAINING COLLEGE (G.T.T.T.C) KUMBA"
)
FRENCH_HEADER = (
    "République du Cameroun\n"
    "Paix – Travail – Patrie\n"
    "MINISTÈRE DES ENSEIGNEMENTS SECONDAIRES\n"
    "ECOLE NORMALE D'INSTITUTEURS DE L'ENSEIGNEMENT TECHNIQUE (E.N.I.E.T) DE KUMBA"
)

SUBJECT_HEADERS = [
    'Subjects and Teacher Names',
    'Competencies Evaluated',
    'Mks/20',
    'Mks/20',
    'Avg/20',
    'Coef',
    'Avg*Coef',
    'Grade',
    'Min-Max',
    'Remark and Teacher Sign.',
]
REPORT_COLUMN_WIDTHS = [25, 15, 10, 10, 10, 8, 12, 8, 12, 20]
FOOTER_HEADERS = [
    'Remarks on Student Performance',
    "Parent/Guardian's Signature",
    "Class Master's Signature",
    'The Principal',
]

SUMMARY_COLUMN_WIDTHS = [
    4, 25, 4.55, 4.55, 5.55, 7.55, 6.55, 3.55, 7.55, 6.55, 3.55,
    8, 4.55, 4.55, 4.55, 4.55, 4.55, 4.55, 4.55, 4.55, 5.55,
]
SUMMARY_HEADER_ROWS = [
    ['S/N', 'SUBJECT', 'ENROLLMENT', '', '', 'TOPICS', '', '', 'PERIODS', '', '',
     'CLASS AVG', 'STUDENTS WITH AVG ≥10', '', '', '', '', '', 'AVERAGE ≤ 5 / 20', '', ''],
    ['', '', 'BOYS', 'GIRLS', 'TOTAL', 'PLANNED', 'TAUGHT', '%', 'PLANNED', 'TAUGHT', '%',
     '', 'NO PASSED', '', '', '% PASSED', '', '', '', '', ''],
    ['', '', '', '', '', '', '', '', '', '', '', '',
     'B', 'G', 'T', 'B', 'G', 'T', 'BOYS', 'GIRLS', 'TOTAL'],
]
SUMMARY_MERGES = ['C5:E5', 'F5:H5', 'I5:K5', 'M5:R5', 'S5:U5', 'M6:O6', 'P6:R6', 'S6:U6']
SUMMARY_FIRST_DATA_ROW = 8


def _thin_border(color=None):
    side = Side(style='thin', color=color) if color else Side(style='thin')
    return Border(left=side, right=side, top=side, bottom=side)


def _solid(color):
    return PatternFill(start_color=color, end_color=color, fill_type='solid')


def _round2(value):
    try:
        return round_half_up(float(value), 2)
    except (TypeError, ValueError):
        return value


def workbook_response_bytes(workbook):
    """Serialize a workbook to bytes."""
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


# ============ Report Card ============

def _add_photo(ws, data_uri, anchor):
    """Embed a base64 data URI image at the anchor cell. Unreadable images are skipped."""
    try:
        encoded = data_uri.split(',', 1)[1] if ',' in data_uri else data_uri
        image = XLImage(BytesIO(base64.b64decode(encoded)))
    except (binascii.Error, ValueError, OSError) as e:
        logger.warning(f"Skipping unreadable student photo: {e}")
        return
    image.width = 100
    image.height = 100
    ws.add_image(image, anchor)


def write_report_card(ws, card):
    """Lay out one report card on a worksheet."""
    header_fill = _solid(config.EXCEL_HEADER_COLOR)
    stripe_fill = _solid(config.EXCEL_STRIPE_COLOR)
    border = _thin_border('0000008F')
    center = Alignment(horizontal='center', vertical='center')
    left = Alignment(horizontal='left', vertical='center')
    bold = Font(name='Roboto', size=12, bold=True)
    regular = Font(name='Roboto', size=12)
    failing = Font(name='Roboto', size=12, color=config.EXCEL_FAIL_FONT_COLOR)

    ws.page_setup.paperSize = ws.PAPERSIZE_A4
    ws.page_setup.orientation = 'portrait'
    for index, width in enumerate(REPORT_COLUMN_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(index)].width = width

    # Bilingual header
    row = 1
    for cell_range, text in (('A1:D4', ENGLISH_HEADER), ('F1:J4', FRENCH_HEADER)):
        ws.merge_cells(cell_range)
        cell = ws[cell_range.split(':')[0]]
        cell.value = text
        cell.font = Font(name='Roboto', size=10, bold=True)
        cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
    row += 5

    ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=10)
    title = ws.cell(row=row, column=1, value=f"{card['term']} Term Academic Report {card['academic_year']}")
    title.font = Font(name='Roboto', size=14, bold=True)
    title.alignment = center
    row += 2

    if card.get('student_photo_base64'):
        _add_photo(ws, card['student_photo_base64'], f'I{row}')

    # Student information
    info_rows = [
        ['Name of Student:', card['student_name'].upper(), '', 'Date and Place of Birth:', f"{card['dob']}, {card['pob']}"],
        ['Class:', f"{card['department']}{card['level']}", '', 'Gender:', card['gender']],
        ['Number of Subjects:', card['num_subjects'], '', 'Matricule:', card['student_id']],
        ['No. Passed Subjects:', card['num_passed'], '', 'Repeater:', card['repeater']],
        ['Class Master:', card['class_master'], '', '', ''],
    ]
    for offset, values in enumerate(info_rows):
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=row + offset, column=col, value=value)
            cell.font = bold if col in (1, 4) else regular
    row += len(info_rows) + 1

    # Subjects table
    for col, header in enumerate(SUBJECT_HEADERS, start=1):
        cell = ws.cell(row=row, column=col, value=header)
        cell.font = bold
        cell.fill = header_fill
        cell.border = border
        cell.alignment = center
    row += 1

    pass_mark = config.PASS_MARK
    for index, subject in enumerate(card['subjects']):
        values = [
            subject['subject'],
            subject.get('competencies') or 'N/A',
            _round2(subject['ca_score']),
            _round2(subject['exam_score']),
            _round2(subject['average']),
            subject['coef'],
            _round2(subject['weighted_average']),
            subject['grade'],
            subject.get('min_max_average') or 'N/A',
            subject.get('remark_on_average') or 'N/A',
        ]
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=row + index, column=col, value=value)
            cell.font = regular
            cell.border = border
            cell.alignment = left if col == 1 else center
            # Scores below the pass mark in red; Avg*Coef follows the subject average
            if col in (3, 4, 5) and value < pass_mark:
                cell.font = failing
            if col == 7 and subject['average'] < pass_mark:
                cell.font = failing
            if index % 2 == 1:
                cell.fill = stripe_fill
    row += len(card['subjects']) + 2

    # Discipline / performance / class profile block
    for index, header in enumerate(['Discipline', 'Student Performance', 'Class Profile']):
        start_col = index * 3 + 1
        ws.merge_cells(start_row=row, start_column=start_col, end_row=row, end_column=start_col + 2)
        cell = ws.cell(row=row, column=start_col, value=header)
        cell.font = bold
        cell.fill = header_fill
        cell.alignment = center
        cell.border = border
    row += 1

    discipline = card['discipline']
    performance = card['performance']
    profile = card['class_profile']
    blocks = [
        (1, [
            ('Unjustified Abs', discipline['unjustified_abs']),
            ('Justified Abs', discipline['justified_abs']),
            ('Late (times)', discipline['late']),
            ('Punishment (hrs)', discipline['punishment']),
            ('Conduct', discipline['conduct']),
            ('Warnings', discipline['warning']),
            ('Reprimands', discipline['reprimand']),
            ('Suspensions', discipline['suspension']),
        ]),
        (4, [
            ('Total Score', _round2(performance['total_weighted_score'])),
            ('Coefficient', performance['total_coef']),
            ('Rank', performance['class_postion']),
            ('Term Average', _round2(performance['term_average'])),
            ('Grade', grade_for_average(performance['term_average'])),
            ('Remark', performance['performance_remark']),
        ]),
        (7, [
            ('Class Average', f"{profile['class_average']:.2f}"),
            ('Min - Max', profile['min_max']),
            ('No. Enrolled', profile['num_enrolled']),
            ('No. Passed', profile['num_passed']),
            ('Annual Avg', profile['annual_average']),
            ('Annual Passed', profile['annual_num_passed']),
        ]),
    ]
    block_rows = max(len(items) for _, items in blocks)
    for start_col, items in blocks:
        for offset, (label, value) in enumerate(items):
            label_cell = ws.cell(row=row + offset, column=start_col, value=label)
            label_cell.font = Font(name='Roboto', size=11, bold=True)
            label_cell.alignment = left
            value_cell = ws.cell(row=row + offset, column=start_col + 1, value=value)
            value_cell.font = Font(name='Roboto', size=11)
            value_cell.alignment = center
    for offset in range(block_rows):
        for col in range(1, 10):
            ws.cell(row=row + offset, column=col).border = border
    row += block_rows + 1

    # Footer and signature row
    for col, header in enumerate(FOOTER_HEADERS, start=1):
        cell = ws.cell(row=row, column=col, value=header)
        cell.font = bold
        cell.fill = header_fill
        cell.alignment = center
        cell.border = border
    row += 1
    for col in range(1, len(FOOTER_HEADERS) + 1):
        ws.cell(row=row, column=col, value='').border = border
    ws.row_dimensions[row].height = 50
    return ws


def build_report_card_workbook(cards):
    """One 'Report Card' sheet per card."""
    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for index, card in enumerate(cards, start=1):
        title = 'Report Card' if len(cards) == 1 else f'Report Card {index}'
        write_report_card(wb.create_sheet(title=title), card)
    if not cards:
        wb.create_sheet(title='Report Card')
    return wb


# ============ Summary Statistics ============

def build_summary_statistics_workbook(document, title='Summary Statistics of Results'):
    """
    Landscape summary statistics sheet from the statistics summaryDocument.

    Topic and period coverage columns are left blank.
    """
    header = document['header']
    rows = document['statistics']

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = 'Summary Statistics'
    ws.page_setup.paperSize = ws.PAPERSIZE_A4
    ws.page_setup.orientation = 'landscape'

    for index, width in enumerate(SUMMARY_COLUMN_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(index)].width = width

    heading_font = Font(name='Times New Roman', size=11, bold=True)
    center = Alignment(horizontal='center', vertical='center', wrap_text=True)

    info = [f"ACADEMIC YEAR: {header['academicYear'].upper()}"] if header.get('academicYear') else []
    if header.get('department'):
        info.append(f"DEPARTMENT: {header['department'].upper()}")
    if header.get('level'):
        info.append(f"LEVEL: {header['level'].upper()}")

    for row, text in enumerate([
        title.upper(),
        f"NAME OF INSTITUTION: {header['institutionName'].upper()}",
        '     |     '.join(info),
    ], start=1):
        ws.merge_cells(f'A{row}:U{row}')
        cell = ws[f'A{row}']
        cell.value = text
        cell.font = heading_font
        cell.alignment = center

    header_font = Font(name='Times New Roman', size=7, bold=True)
    header_fill = _solid('FFF8F9FA')
    for offset, values in enumerate(SUMMARY_HEADER_ROWS):
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=5 + offset, column=col, value=value or None)
            cell.font = header_font
            cell.alignment = center
            cell.fill = header_fill
    for cell_range in SUMMARY_MERGES:
        ws.merge_cells(cell_range)

    data_font = Font(name='Times New Roman', size=8)
    for index, stat in enumerate(rows):
        row = SUMMARY_FIRST_DATA_ROW + index
        values = [
            index + 1,
            stat['subject'].upper(),
            stat['enrollment']['boys'],
            stat['enrollment']['girls'],
            stat['enrollment']['total'],
            '', '', '', '', '', '',
            stat['classAverage'],
            stat['passedGte10']['boys'],
            stat['passedGte10']['girls'],
            stat['passedGte10']['total'],
            stat['passedGte10']['boys_percentage'],
            stat['passedGte10']['girls_percentage'],
            stat['passedGte10']['total_percentage'],
            stat['avgLte5']['boys'],
            stat['avgLte5']['girls'],
            stat['avgLte5']['total'],
        ]
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=row, column=col, value=value)
            cell.font = data_font
            cell.alignment = Alignment(horizontal='left' if col == 2 else 'center', vertical='center')

    border = _thin_border()
    for row in range(5, SUMMARY_FIRST_DATA_ROW + len(rows)):
        for col in range(1, len(SUMMARY_COLUMN_WIDTHS) + 1):
            ws.cell(row=row, column=col).border = border
        ws.row_dimensions[row].height = 24

    return wb
