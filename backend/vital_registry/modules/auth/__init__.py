# Authentication module: request dependencies and pre-authorized identities
