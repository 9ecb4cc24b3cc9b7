"""Business constants shared by the scoring engine and the loan policy layer"""

# Loan limit is this share of the average completed-transaction quantity
CREDIT_PERCENTAGE = 0.40

# Loans fall due this many days after the request
LOAN_DUE_DAYS = 45

# Share of a supplier's transaction proceeds applied to outstanding loans
AUTO_DEBIT_PERCENT = 100

# Transaction count at which the count sub-score saturates
IDEAL_TRANSACTION_CYCLE = 10

# Fixed score for a supplier with exactly one completed transaction
STARTER_SCORE = 20
STARTER_COUNT_SCORE = 10

# Upper bound (inclusive) of each category, checked in ascending order.
# Scores above the last bound are Excellent.
CATEGORY_THRESHOLDS = (
    (0, "No Score"),
    (20, "Poor"),
    (40, "Fair"),
    (60, "Good"),
    (75, "Very Good"),
)

# Methods accepted for payments recorded by staff; auto-debit is applied by the system
MANUAL_PAYMENT_METHODS = ("cash", "bank", "credit")
