"""Project discovery: README, ecosystem, binary and source tree."""
