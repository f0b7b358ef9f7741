"""Physics package: vector math and the flight model."""
