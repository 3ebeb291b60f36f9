"""
Test suite for the ballot replay engine.

Focus areas:
- Event classification across protocol generations and deployments
- Voter set reconstruction
- Ballot tallying and eligibility
- Enrichment failure handling
- Report determinism
"""
