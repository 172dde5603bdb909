"""
MCP tool implementations for water treatment evaluation.

- evaluation: resolve parameters, check requirements, build action tables,
  classify values and assemble analysis reports
"""
