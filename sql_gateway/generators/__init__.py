"""
Statement generators, one pure function per catalog operation.
Each takes ValidatedArguments (defaults already applied) and returns a SqlStatement.
"""
