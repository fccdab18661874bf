"""git-releaser: bump, changelog, tag and publish a release in one go."""
