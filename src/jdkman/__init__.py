"""
jdkman - resolves, installs, links and removes JDKs.
"""
