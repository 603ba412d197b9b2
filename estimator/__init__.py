"""
Renovation project estimator — costing, validation and repair of project records.
"""
