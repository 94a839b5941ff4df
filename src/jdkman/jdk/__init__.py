"""
The jdkman resolution engine: the JDK data model and provider interfaces,
version handling, candidate selection, file operations and the manager.
"""
