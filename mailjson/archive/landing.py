"""Default landing page for browsing the archive.

A static page that loads mail.json, lists conversations and opens
c/<id>.json on demand. Users are free to replace it; it is only written
when missing.
"""

LANDING_PAGE_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<meta name="generator" content="mailjson VERSION">
<title>Mail archive</title>
<style>
body { font-family: sans-serif; margin: 0 auto; max-width: 60em; padding: 1em; }
li { cursor: pointer; margin: 0.3em 0; }
.count { color: #777; }
.date { color: #777; font-size: smaller; }
pre { white-space: pre-wrap; border-top: 1px solid #ddd; padding-top: 0.5em; }
</style>
</head>
<body>
<h1>Mail archive</h1>
<ul id="conversations"></ul>
<div id="conversation"></div>
<script>
function sender(header) {
  if (!header || !header.From) { return ""; }
  var from = header.From[0];
  return from.Name || from.Address;
}

function show(id) {
  fetch("c/" + id + ".json").then(function (r) { return r.json(); }).then(function (c) {
    var out = document.getElementById("conversation");
    out.innerHTML = "";
    c.Msgs.forEach(function (m) {
      var h = document.createElement("h3");
      h.textContent = (m.Header && m.Header.Subject) || "(no subject)";
      var d = document.createElement("div");
      d.className = "date";
      d.textContent = sender(m.Header) + " " + m.Date;
      var p = document.createElement("pre");
      p.textContent = m.Body;
      out.appendChild(h);
      out.appendChild(d);
      out.appendChild(p);
    });
  });
}

fetch("mail.json").then(function (r) { return r.json(); }).then(function (entries) {
  var list = document.getElementById("conversations");
  (entries || []).forEach(function (entry) {
    var m = entry.Msgs[0];
    var li = document.createElement("li");
    li.textContent = ((m.Header && m.Header.Subject) || "(no subject)") + " ";
    var count = document.createElement("span");
    count.className = "count";
    count.textContent = "(" + entry.Count + ") " + sender(m.Header);
    li.appendChild(count);
    li.onclick = function () { show(entry.Id); };
    list.appendChild(li);
  });
});
</script>
</body>
</html>
"""


def render_landing_page(version: str) -> str:
    return LANDING_PAGE_TEMPLATE.replace("VERSION", version, 1)
