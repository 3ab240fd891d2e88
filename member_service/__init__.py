# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Member Service: referral hierarchy of members with automatic upline placement."""
