"""Bundled sample agreement used by the demo command and the test suite."""

DEMO_DOCUMENT_NAME = "Demo_Facility_Agreement.pdf"

DEMO_FACILITY_AGREEMENT = """
FACILITY AGREEMENT dated January 10, 2026

BORROWER: Acme Corporation Limited
LENDER: Global Bank PLC
FACILITY AGENT: Global Bank PLC

FACILITY AMOUNT: $500,000,000 (Five Hundred Million Dollars)

This Term Loan Facility Agreement sets out the terms under which the Lender agrees to make available
to the Borrower a revolving credit facility.

INTEREST: The interest rate shall be Term SOFR plus a margin of 2.50% per annum (250 basis points).

MATURITY DATE: January 10, 2031
EFFECTIVE DATE: January 15, 2026

FINANCIAL COVENANTS:
- Leverage Ratio: The Borrower shall ensure that the Leverage Ratio does not exceed 3.5:1
- Interest Coverage Ratio: The Borrower shall maintain an Interest Coverage Ratio of at least 4.0:1
- Minimum Net Worth: The Borrower shall maintain minimum net worth of $100,000,000

INFORMATION COVENANTS:
The Borrower shall deliver annual financial statements within 120 days of each financial year end.
The Borrower shall provide quarterly management accounts within 45 days of each quarter end.

NEGATIVE COVENANTS:
The Borrower shall not create any security over its assets without prior consent.
The Borrower shall not dispose of any material assets.
The Borrower will not make any acquisitions exceeding $50,000,000 without consent.

EVENTS OF DEFAULT:
Cross-default provisions shall apply to any indebtedness exceeding $10,000,000.
Material Adverse Change clause: Any MAC shall constitute an Event of Default.
Change of Control: Any change of control shall require mandatory prepayment.

Upon an Event of Default, the Lender may declare all amounts immediately due and payable (acceleration).

SUSTAINABILITY-LINKED PROVISIONS:
This is a Sustainability-Linked Loan with the following KPIs:
- KPI 1: Reduce carbon emissions by 25% by 2028
- KPI 2: Achieve 50% renewable energy usage by 2027

Margin Adjustment: The margin shall be reduced by 5 basis points upon achievement of each KPI target.

ESG Reporting: The Borrower shall provide annual sustainability reports.
"""
