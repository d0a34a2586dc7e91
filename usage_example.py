"""
Usage examples for the SQL column analyzer
Shows how to call the analyzer from your own code
"""
from columnlens.column_analyzer import SQLQueryAnalyzer, QueryAnalysisError

analyzer = SQLQueryAnalyzer()

examples = [
    ('Simple SELECT query', 'SELECT name, email, age FROM users'),
    ('Query with aliases', 'SELECT name AS customer_name, email AS contact_email FROM customers'),
    ('Query with JOIN', 'SELECT u.name, u.email, p.title FROM users u JOIN posts p ON u.id = p.user_id'),
    ('Query with aggregate functions', 'SELECT COUNT(id) AS total_users, AVG(age) AS average_age FROM users'),
    ('Query with subquery', 'SELECT name, (SELECT COUNT(*) FROM orders WHERE user_id = u.id) AS order_count FROM users u'),
]

print("SQL Column Analyzer - Usage Examples")
print("=" * 80)

for title, query in examples:
    columns = analyzer.analyze_query(query)
    print(f"\n{title}")
    print(f"Query: {query}")
    print(f"Result columns: [{', '.join(columns)}]")

print("\nError handling")
try:
    analyzer.analyze_query('INSERT INTO users (name) VALUES ("John")')
except QueryAnalysisError as e:
    print(f"Invalid query: {e}")

print("\nNaming rules")
for column in analyzer.describe_query('SELECT product_name, price * quantity, price * quantity AS total FROM order_items'):
    print(f"  {column['expression']!r:40} -> {column['name']} ({column['rule']})")
