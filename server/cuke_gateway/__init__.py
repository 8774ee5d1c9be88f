"""HTTP gateway for the Cucumber report catalog."""
