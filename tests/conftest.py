"""
Shared invoice text samples.

Page texts are written the way pdfplumber returns them (one printed line per
text line); tests normalize them where needed.
"""

import pytest


HEADER_PAGE = """Tax Invoice
Vendor ID: V12345
Attention To: John Tan
Invoice Date: 05/03/2024
Credit Term: 30 Days
Invoice No: INV-001
Related Invoice No: REL-009
Invoice Status: Approved
Invoicing Instruction ID: INS-77
Description: Supply of office equipment for March
"""

ITEMS_PAGE = """No. Description Unit Price Quantity Gross Amt (EX. GST) Gross Amt (inc. GST)
1 Laptop stand aluminium 25.5000 0 2.00000 51.00 55.59
2 Monitor arm 80.0000 0 1.00000 80.00 87.20
3 USB-C docking station 1,200.0000 0 1.00000 1,200.00 1,308.00
Invoice Amount Summary
Currency: Singapore Dollar
Sub Total (Excluding GST): 1,331.00
Total GST Payable: 119.79
"""

ITEMISED_PAGE = """Tax Invoice
Vendor ID: V555
Invoice No: INV-100
Invoice Date: 5/3/24
Invoice Status: Draft
1 Consulting services March 150.00 10.00000 1,500.00 135.00 1,635.00
2 Travel expenses 200.00 1.00000 200.00 18.00 218.00
"""

ITEMISED_FOUR_DP_PAGE = """Tax Invoice
Vendor ID: V777
Invoice No: INV-200
1 Consulting services 150.0000 10.00000 1,500.00 135.00 1,635.00
2 Travel expenses 200.0000 1.00000 200.00 18.00 218.00
"""

ITEMISED_STRAY_ZERO_PAGE = """Tax Invoice
Vendor ID: V777
Invoice No: INV-200
1 Consulting services 150.0000 0 10.00000 1,500.00 135.00 1,635.00
2 Travel expenses 200.0000 0 1.00000 200.00 18.00 218.00
"""

PASTED_TEXT = """Tax Invoice
Vendor ID: V100
Invoice No: INV-001
Invoice Status: Approved
1 Laptop stand aluminium 25.5000 0 2.00000 51.00 55.59
2 Monitor arm 80.0000 0 1.00000 80.00 87.20
Invoice Amount Summary
Currency: Singapore Dollar
Sub Total (Excluding GST): 131.00
Total GST Payable: 11.79
Tax Invoice
Vendor ID: V200
Invoice No: INV-002
Invoice Status: Approved
1 Printer toner cartridge 45.0000 0 4.00000 180.00 196.20
Invoice Amount Summary
Currency: Singapore Dollar
Sub Total (Excluding GST): 180.00
Total GST Payable: 16.20
"""


@pytest.fixture
def header_page() -> str:
    return HEADER_PAGE


@pytest.fixture
def items_page() -> str:
    return ITEMS_PAGE


@pytest.fixture
def itemised_page() -> str:
    return ITEMISED_PAGE


@pytest.fixture
def pasted_text() -> str:
    return PASTED_TEXT


@pytest.fixture(params=[ITEMISED_FOUR_DP_PAGE, ITEMISED_STRAY_ZERO_PAGE], ids=["plain", "stray_zero"])
def four_dp_itemised_page(request) -> str:
    return request.param
