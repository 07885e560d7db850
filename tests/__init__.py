"""
AirTwitch Test Suite

Test Categories:
- unit/: Fast, isolated unit tests over a mock HTTP transport
- integration/: Context and command line flows with fake discovery
- fixtures/: Shared test data, factories and fakes
"""
