"""Lab-result normalization and trend analytics.

Turns free-text-named lab values into canonical, classified records and
computes trend signals from their history. The core is pure computation;
persistence is injected through the record service.
"""
