"""
General-purpose helpers not related to the client layer itself
(neither to the registries nor to the materialization nor to the structs),
which are used to prepare and control the runtime environment.

These are things that should better be in the standard library
or in the dependencies.

As a rule of thumb, helpers MUST be abstracted from the client layer
to such an extent that they could be extracted as reusable libraries.
If they implement concepts of the resource model, they are not "helpers"
(consider making them _kits, structs, intents, or the reactor parts).
"""
