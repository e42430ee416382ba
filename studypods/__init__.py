"""
Study Pods accountability engine.

Small-group accountability for JLPT exam preparation: validated daily
check-ins, streaks with grace days, pod matching, weekly reviews and
rule-based coaching insights.
"""
