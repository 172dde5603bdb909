"""
Test suite for the water treatment evaluation MCP server.

Organization:
- test_parameter_catalog.py - Static parameter definitions
- test_parameter_resolver.py - Enable rules and WaterSystem/Plant precedence
- test_requirement_checker.py - Required inputs and the temperature coupling
- test_action_table.py - Default bands and configured overrides
- test_evaluator.py - Classification including LSI/RSI banding
- test_presenter.py - Status text and colors
- test_water_analysis.py - End-to-end report assembly
- test_sample_validation.py - Value coercion and physical-domain checks
- test_action_defaults_db.py - Default action YAML loading
- test_calculation_client.py - Calculation service HTTP client
- test_config_repository.py - YAML and HTTP config repositories
- test_config.py - Environment settings
- test_state_container.py - Analysis session and calculation lifecycle
- test_server.py - MCP tools through the in-memory FastMCP client

Run with:
    pytest tests/
    pytest tests/ --cov=core --cov=tools --cov=utils
"""
