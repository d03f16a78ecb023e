"""
Static Analysis Package.

Counts raw-memory usages in parsed packages and renders the import tree.

Modules:
    - ``matchers``: Construct recognition and role classification.
    - ``counter``: Per-package counts and transitive totals.
    - ``tree``: Depth-first tree walk producing report rows and stats.
    - ``report``: Table, summary, legend and JSON output.
"""
