"""
SQL for the dashboard views.

Every builder takes the fully qualified DATABASE.SCHEMA prefix. User supplied
values are never formatted into the text; they are bound with %(name)s
placeholders, so literal percent signs are written as %%.
"""

FRAUD_COUNT = "SUM(CASE WHEN fl.IS_FRAUD THEN 1 ELSE 0 END)"
FRAUD_AMOUNT = "SUM(CASE WHEN fl.IS_FRAUD THEN t.AMOUNT ELSE 0 END)"


def _fraud_rate(count: str = "COUNT(*)") -> str:
    return f"ROUND({FRAUD_COUNT} * 100.0 / NULLIF({count}, 0), 2)"


def _labelled_transactions(schema: str) -> str:
    return (
        f"FROM {schema}.TRANSACTIONS t\n"
        f"JOIN {schema}.FRAUD_LABELS fl ON t.TRANSACTION_ID = fl.TRANSACTION_ID"
    )


def alerts(schema: str, pending: bool) -> str:
    where_clause = "WHERE fl.IS_FRAUD = TRUE"
    if pending:
        where_clause += " AND fl.INVESTIGATION_STATUS IN ('pending', 'investigating')"

    return f"""
SELECT
    t.TRANSACTION_ID,
    t.TRANSACTION_TIMESTAMP AS FECHA,
    c.NAME AS CLIENTE,
    t.AMOUNT AS MONTO,
    t.MERCHANT_CATEGORY AS CATEGORIA,
    t.CITY AS CIUDAD,
    fl.FRAUD_TYPE AS TIPO_FRAUDE,
    fl.INVESTIGATION_STATUS AS ESTADO
FROM {schema}.TRANSACTIONS t
JOIN {schema}.CUSTOMERS c ON t.CUSTOMER_ID = c.CUSTOMER_ID
JOIN {schema}.FRAUD_LABELS fl ON t.TRANSACTION_ID = fl.TRANSACTION_ID
{where_clause}
ORDER BY t.TRANSACTION_TIMESTAMP DESC
LIMIT %(limit)s
"""


def fraud_by_time(schema: str) -> str:
    return f"""
SELECT
    DATE_TRUNC('day', t.TRANSACTION_TIMESTAMP) AS FECHA,
    COUNT(*) AS TOTAL_TX,
    {FRAUD_COUNT} AS FRAUDES,
    {_fraud_rate()} AS TASA_FRAUDE
{_labelled_transactions(schema)}
GROUP BY 1
ORDER BY 1
"""


def fraud_by_category(schema: str) -> str:
    return f"""
SELECT
    t.MERCHANT_CATEGORY AS CATEGORIA,
    COUNT(*) AS TOTAL_TX,
    {FRAUD_COUNT} AS FRAUDES,
    {_fraud_rate()} AS TASA_FRAUDE,
    {FRAUD_AMOUNT} AS MONTO_FRAUDE
{_labelled_transactions(schema)}
GROUP BY 1
ORDER BY TASA_FRAUDE DESC
"""


def fraud_by_geography(schema: str) -> str:
    return f"""
SELECT
    t.CITY AS CIUDAD,
    COUNT(*) AS TOTAL_TX,
    {FRAUD_COUNT} AS FRAUDES,
    {_fraud_rate()} AS TASA_FRAUDE,
    {FRAUD_AMOUNT} AS MONTO_FRAUDE
{_labelled_transactions(schema)}
GROUP BY 1
ORDER BY FRAUDES DESC
LIMIT 20
"""


def _period(schema: str, label: str, start: str, end: str) -> str:
    return f"""
    SELECT
        '{label}' AS PERIODO,
        COUNT(*) AS TOTAL_TX,
        {FRAUD_COUNT} AS FRAUDES,
        {_fraud_rate()} AS TASA_FRAUDE,
        SUM(t.AMOUNT) AS MONTO_TOTAL,
        {FRAUD_AMOUNT} AS MONTO_FRAUDE
    {_labelled_transactions(schema)}
    WHERE t.TRANSACTION_TIMESTAMP BETWEEN %({start})s AND %({end})s
"""


def compare_periods(schema: str) -> str:
    return f"""
WITH period1 AS ({_period(schema, "Period 1", "period1_start", "period1_end")}),
period2 AS ({_period(schema, "Period 2", "period2_start", "period2_end")})
SELECT * FROM period1
UNION ALL
SELECT * FROM period2
"""


def customer_transactions(schema: str) -> str:
    return f"""
SELECT
    t.TRANSACTION_ID,
    t.TRANSACTION_TIMESTAMP AS FECHA,
    t.AMOUNT AS MONTO,
    t.MERCHANT_CATEGORY AS CATEGORIA,
    t.CITY AS CIUDAD,
    t.CHANNEL AS CANAL,
    CASE WHEN fl.IS_FRAUD THEN 'Fraude' ELSE 'Normal' END AS ESTADO
{_labelled_transactions(schema)}
WHERE t.CUSTOMER_ID = %(customer_id)s
ORDER BY t.TRANSACTION_TIMESTAMP DESC
LIMIT 100
"""


def search_customers(schema: str) -> str:
    return f"""
SELECT CUSTOMER_ID, NAME, EMAIL, CITY, COUNTRY, RISK_SCORE
FROM {schema}.CUSTOMERS
WHERE LOWER(NAME) LIKE LOWER('%%' || %(search)s || '%%')
   OR LOWER(EMAIL) LIKE LOWER('%%' || %(search)s || '%%')
ORDER BY RISK_SCORE DESC
LIMIT 20
"""


def top_risk_customers(schema: str) -> str:
    return f"""
SELECT c.CUSTOMER_ID, c.NAME, c.EMAIL, c.CITY, c.COUNTRY, c.RISK_SCORE
FROM {schema}.CUSTOMERS c
ORDER BY c.RISK_SCORE DESC
LIMIT 10
"""


def metrics(schema: str) -> str:
    return f"""
SELECT
    COUNT(*) AS TOTAL_TRANSACTIONS,
    {FRAUD_COUNT} AS TOTAL_FRAUDS,
    SUM(t.AMOUNT) AS TOTAL_AMOUNT,
    {FRAUD_AMOUNT} AS FRAUD_AMOUNT,
    COUNT(DISTINCT t.CUSTOMER_ID) AS UNIQUE_CUSTOMERS,
    {_fraud_rate()} AS FRAUD_RATE
{_labelled_transactions(schema)}
"""


def model_performance(schema: str) -> str:
    return f"""
SELECT
    SUM(CASE WHEN st.XGB_PREDICTION = 1 AND tf.IS_FRAUD = TRUE THEN 1 ELSE 0 END) AS TRUE_POSITIVES,
    SUM(CASE WHEN st.XGB_PREDICTION = 1 AND tf.IS_FRAUD = FALSE THEN 1 ELSE 0 END) AS FALSE_POSITIVES,
    SUM(CASE WHEN st.XGB_PREDICTION = 0 AND tf.IS_FRAUD = TRUE THEN 1 ELSE 0 END) AS FALSE_NEGATIVES,
    SUM(CASE WHEN st.XGB_PREDICTION = 0 AND tf.IS_FRAUD = FALSE THEN 1 ELSE 0 END) AS TRUE_NEGATIVES
FROM {schema}.SCORED_TRANSACTIONS st
JOIN {schema}.TRANSACTION_FEATURES tf ON st.TRANSACTION_ID = tf.TRANSACTION_ID
"""


def map_data(schema: str) -> str:
    return f"""
SELECT
    t.CITY,
    COUNT(*) AS TOTAL_TRANSACTIONS,
    ROUND(SUM(CASE WHEN f.IS_FRAUD = 1 THEN 1 ELSE 0 END) * 100.0 / COUNT(*), 2) AS FRAUD_RATE
FROM {schema}.TRANSACTIONS t
LEFT JOIN {schema}.FRAUD_LABELS f ON t.TRANSACTION_ID = f.TRANSACTION_ID
GROUP BY t.CITY
ORDER BY TOTAL_TRANSACTIONS DESC
"""


def top_categories(schema: str) -> str:
    return f"""
SELECT
    t.MERCHANT_CATEGORY AS CATEGORIA,
    {FRAUD_COUNT} AS FRAUDES,
    {_fraud_rate()} AS TASA_FRAUDE
{_labelled_transactions(schema)}
GROUP BY 1
ORDER BY FRAUDES DESC
LIMIT 10
"""


def top_cities(schema: str) -> str:
    return f"""
SELECT
    t.CITY AS CIUDAD,
    {FRAUD_COUNT} AS FRAUDES,
    {_fraud_rate()} AS TASA_FRAUDE
{_labelled_transactions(schema)}
GROUP BY 1
ORDER BY FRAUDES DESC
LIMIT 10
"""
